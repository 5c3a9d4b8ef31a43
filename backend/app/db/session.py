"""
Database session configuration.

This module handles database engine creation and session management
using SQLAlchemy with async support for PostgreSQL.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from backend.app.core.config import settings

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    future=True,
)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

# Create declarative base for models
Base = declarative_base()


async def get_db():
    """
    FastAPI dependency for database sessions.
    
    Yields an async database session and ensures it's properly closed.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def transaction_scope(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """
    Run a unit of work on ``db`` as one transaction.
    
    Commits when the block exits normally and rolls back on any exception,
    which is then re-raised. Any transaction already open on the session
    (e.g. autobegun by an earlier read) is closed first so the block starts
    from a clean state.
    """
    if db.in_transaction():
        await db.rollback()
    try:
        yield db
        await db.commit()
    except BaseException:
        await db.rollback()
        raise
