"""
Ledger.

Append-only storage of balance movements.
"""

from typing import List, Sequence, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.models.ledger_entry import LedgerEntry


async def append(db: AsyncSession, entries: Sequence[LedgerEntry]) -> List[LedgerEntry]:
    """
    Write a batch of entries inside the caller's transaction.
    
    The batch is flushed together; on failure nothing from it survives the
    caller's rollback.
    """
    db.add_all(entries)
    await db.flush()
    return list(entries)


async def history(
    db: AsyncSession,
    account_id: int,
    limit: int = 50,
    offset: int = 0
) -> Tuple[List[LedgerEntry], int]:
    """
    List an account's entries, newest first.
    
    Returns:
        (page of entries, total number of entries for the account)
    """
    total = await db.scalar(
        select(func.count(LedgerEntry.id)).where(LedgerEntry.account_id == account_id)
    )
    result = await db.execute(
        select(LedgerEntry)
        .where(LedgerEntry.account_id == account_id)
        .order_by(LedgerEntry.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all()), total or 0
