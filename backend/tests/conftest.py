"""
Centralized Test Configuration.
"""

import pytest
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.db.session import get_db, Base
from backend.app.core.security import get_password_hash
from backend.app.models.account import Account
from backend.app.models.ledger_entry import LedgerEntry

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)).lower():
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)

@pytest.fixture(scope="session", autouse=True)
def apply_overrides():
    """Apply overrides once for the session."""
    
    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    
    app.dependency_overrides = {}

@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    
    yield
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


# Wallet helpers

async def create_account(session, mobile, balance="1000.00", name=None, password="password123"):
    """Insert an account directly, bypassing registration."""
    account = Account(
        name=name or f"User {mobile}",
        mobile=mobile,
        hashed_password=get_password_hash(password),
        balance=Decimal(balance),
    )
    session.add(account)
    await session.commit()
    return account


async def fetch_balance(mobile):
    """Read a balance through a fresh session so no cached state is involved."""
    async with TestingSessionLocal() as session:
        result = await session.execute(select(Account.balance).where(Account.mobile == mobile))
        return result.scalar_one()


async def count_ledger_entries():
    async with TestingSessionLocal() as session:
        result = await session.execute(select(LedgerEntry))
        return len(result.scalars().all())


@pytest.fixture
def make_account(db_session):
    async def _make(mobile, balance="1000.00", **kwargs):
        return await create_account(db_session, mobile, balance, **kwargs)
    return _make


@pytest.fixture
def auth_headers(client):
    """Log in through the API and return the Authorization header."""
    async def _login(mobile, password="password123"):
        response = await client.post("/login", json={"mobile": mobile, "password": password})
        assert response.status_code == 200, response.text
        return {"Authorization": f"Bearer {response.json()['token']}"}
    return _login


@pytest.fixture
def balance_of():
    return fetch_balance


@pytest.fixture
def ledger_count():
    return count_ledger_entries
