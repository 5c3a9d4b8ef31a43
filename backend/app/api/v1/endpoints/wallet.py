"""
Wallet API endpoints.

Balance lookup, internal transfers and ledger history for the
authenticated caller.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.core.dependencies import get_current_account_id
from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.domain.wallet import account_store, ledger
from backend.app.domain.wallet.transfer_service import TransferService
from backend.app.schemas.wallet import (
    BalanceResponse,
    TransferRequest,
    TransferResponse,
    LedgerEntryResponse,
    LedgerHistoryResponse,
)

router = APIRouter(tags=["Wallet"])


@router.get("/profile/balance", response_model=BalanceResponse)
async def get_balance(
    account_id: int = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the caller's current balance.
    
    Raises:
        404: If the account no longer exists
    """
    account = await account_store.find_by_id(db, account_id)
    if not account:
        raise ResourceNotFoundError("Account", account_id, message="User not found.")
    
    return BalanceResponse(balance=account.balance)


@router.post("/transfer-internal", response_model=TransferResponse)
async def transfer_internal(
    transfer_data: TransferRequest,
    account_id: int = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db)
):
    """
    Transfer money from the caller to another account by mobile number.
    
    Errors:
    - 400: Insufficient balance, self transfer, or invalid amount
    - 404: Recipient is a well-formed mobile with no account
    - 422: Malformed body. A recipient_mobile that is not 10 digits
      (e.g. "+919876543210") is rejected here rather than looked up,
      since registration only accepts 10-digit mobiles and such a
      number can never resolve to an account.
    - 500: Transaction could not be committed (nothing was applied)
    """
    result = await TransferService.transfer(
        db,
        source_account_id=account_id,
        recipient_mobile=transfer_data.recipient_mobile,
        amount=transfer_data.amount,
    )
    
    return TransferResponse(new_balance=result.source_balance, transfer_id=result.transfer_id)


@router.get("/transactions", response_model=LedgerHistoryResponse)
async def list_transactions(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    account_id: int = Depends(get_current_account_id),
    db: AsyncSession = Depends(get_db)
):
    """
    List the caller's ledger entries, newest first.
    """
    account = await account_store.find_by_id(db, account_id)
    if not account:
        raise ResourceNotFoundError("Account", account_id, message="User not found.")
    
    entries, total = await ledger.history(db, account_id, limit=limit, offset=offset)
    
    return LedgerHistoryResponse(
        entries=[LedgerEntryResponse.model_validate(entry) for entry in entries],
        total_count=total,
        balance=account.balance,
    )
