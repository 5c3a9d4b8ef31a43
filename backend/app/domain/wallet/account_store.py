"""
Account Store.

Reads and writes account rows on an explicitly passed session, so that every
call made during one transfer shares the same transaction.
"""

from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.account import Account


async def find_by_id(db: AsyncSession, account_id: int) -> Optional[Account]:
    result = await db.execute(select(Account).where(Account.id == account_id))
    return result.scalar_one_or_none()


async def find_by_key(db: AsyncSession, mobile: str) -> Optional[Account]:
    """Resolve an account by its lookup key (mobile number)."""
    result = await db.execute(select(Account).where(Account.mobile == mobile))
    return result.scalar_one_or_none()


async def lock_accounts(db: AsyncSession, account_ids: Iterable[int]) -> List[Account]:
    """
    Load accounts with row locks held until the transaction ends.
    
    Rows are locked in ascending id order, so two transfers between the same
    pair of accounts in opposite directions cannot deadlock. The rows are
    re-read even if already present in the session's identity map.
    
    Args:
        db: Database session with an open transaction
        account_ids: IDs to lock (duplicates are ignored)
    
    Returns:
        Locked accounts ordered by id; missing ids are simply absent
    """
    ids = sorted(set(account_ids))
    result = await db.execute(
        select(Account)
        .where(Account.id.in_(ids))
        .order_by(Account.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def create(
    db: AsyncSession,
    name: str,
    mobile: str,
    hashed_password: str,
    opening_balance: Decimal
) -> Account:
    """
    Insert a new account.
    
    Raises:
        IntegrityError: If the mobile number is already taken
    """
    account = Account(
        name=name,
        mobile=mobile,
        hashed_password=hashed_password,
        balance=opening_balance,
    )
    db.add(account)
    await db.flush()
    return account


async def save(db: AsyncSession, account: Account) -> Account:
    """
    Write the account's current balance.
    
    The UPDATE is guarded by the row version; if another transaction changed
    the row since it was read, flush raises StaleDataError.
    """
    db.add(account)
    await db.flush()
    return account
