"""
Transfer Service (Domain Logic).

Moves balance between two accounts and records the movement in the ledger.
Must be atomic: both balances and both ledger entries are written in one
transaction, or nothing is.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from backend.app.core.config import settings
from backend.app.core.observability import get_correlation_id
from backend.app.core.exceptions import (
    AppException,
    InsufficientBalanceError,
    InvalidTransferError,
    RecipientNotFoundError,
    ResourceNotFoundError,
    SelfTransferNotAllowedError,
    TransactionAbortedError,
)
from backend.app.db.session import transaction_scope
from backend.app.domain.wallet import account_store, ledger
from backend.app.models.ledger_entry import LedgerEntry
from backend.app.models.wallet_enums import LedgerOperationType, LedgerEntryStatus

logger = logging.getLogger("wallet.transfer")

TWO_PLACES = Decimal("0.01")

# Largest value a Numeric(12, 2) balance column can hold
MAX_AMOUNT = Decimal("9999999999.99")


@dataclass
class TransferResult:
    transfer_id: str
    amount: Decimal
    source_balance: Decimal
    destination_balance: Decimal
    entries: List[LedgerEntry]


def normalize_amount(amount: Any) -> Decimal:
    """
    Parse a transfer amount into a positive Decimal with 2 decimal places.
    
    Raises:
        InvalidTransferError: If the amount is malformed, not finite,
            not positive, above MAX_AMOUNT, or has more than 2 decimal places
    """
    if isinstance(amount, bool):
        raise InvalidTransferError("Invalid amount.")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise InvalidTransferError("Invalid amount.")
    
    if not value.is_finite():
        raise InvalidTransferError("Invalid amount.")
    if value <= 0:
        raise InvalidTransferError("Amount must be greater than zero.", details={"amount": str(value)})
    if value > MAX_AMOUNT:
        raise InvalidTransferError(
            "Amount exceeds the maximum transfer amount.",
            details={"amount": str(value), "max_amount": str(MAX_AMOUNT)}
        )
    if value != value.quantize(TWO_PLACES):
        raise InvalidTransferError(
            "Amount cannot have more than 2 decimal places.",
            details={"amount": str(value)}
        )
    
    return value.quantize(TWO_PLACES)


class TransferService:
    
    @staticmethod
    async def transfer(
        db: AsyncSession,
        source_account_id: int,
        recipient_mobile: str,
        amount: Any,
        max_retries: Optional[int] = None
    ) -> TransferResult:
        """
        Transfer ``amount`` from the caller's account to the account
        registered under ``recipient_mobile``.
        
        Flow:
        1. Validate amount (positive, finite, 2 decimal places)
        2. Resolve recipient by mobile
        3. Lock both account rows (ascending id)
        4. Check balance
        5. Debit sender, credit recipient
        6. Append paired ledger entries
        7. Commit
        
        A write that lost a race with a concurrent transfer (stale row
        version) rolls back and the whole flow runs again on fresh rows.
        
        Args:
            db: Database session; any transaction already open on it is discarded
            source_account_id: Sender, taken from the authenticated caller
            recipient_mobile: Lookup key of the recipient
            amount: Amount to move
            max_retries: Attempts after a version conflict (defaults to settings)
        
        Returns:
            TransferResult with the new balances and the two ledger entries
        
        Raises:
            InvalidTransferError: Bad amount
            RecipientNotFoundError: Recipient mobile does not resolve
            SelfTransferNotAllowedError: Recipient is the sender
            InsufficientBalanceError: Sender balance is below amount
            ResourceNotFoundError: Sender account no longer exists
            TransactionAbortedError: The transaction could not commit
        """
        value = normalize_amount(amount)
        if max_retries is None:
            max_retries = settings.transfer_max_retries
        attempts = max(1, max_retries + 1)
        
        log_context = {
            "correlation_id": get_correlation_id(),
            "source_account_id": source_account_id,
            "recipient_mobile": recipient_mobile,
            "amount": str(value),
        }
        
        for attempt in range(1, attempts + 1):
            try:
                async with transaction_scope(db):
                    result = await TransferService._apply(db, source_account_id, recipient_mobile, value)
            except StaleDataError:
                logger.warning(
                    "Transfer lost a concurrent write, retrying",
                    extra={**log_context, "attempt": attempt}
                )
                continue
            except AppException as exc:
                logger.warning(
                    "Transfer rejected",
                    extra={**log_context, "error_code": exc.error_code}
                )
                raise
            except SQLAlchemyError as exc:
                logger.error(
                    "Transfer aborted by storage error",
                    extra={**log_context, "exception_type": type(exc).__name__},
                    exc_info=True
                )
                raise TransactionAbortedError() from exc
            
            logger.info(
                "Transfer committed",
                extra={**log_context, "transfer_id": result.transfer_id, "attempt": attempt}
            )
            return result
        
        logger.error("Transfer aborted after repeated write conflicts", extra=log_context)
        raise TransactionAbortedError()
    
    @staticmethod
    async def _apply(
        db: AsyncSession,
        source_account_id: int,
        recipient_mobile: str,
        amount: Decimal
    ) -> TransferResult:
        # 1. Resolve recipient
        recipient = await account_store.find_by_key(db, recipient_mobile)
        if recipient is None:
            raise RecipientNotFoundError(recipient_mobile)
        
        if recipient.id == source_account_id:
            raise SelfTransferNotAllowedError()
        
        # 2. Lock both rows in a fixed order
        locked = {
            account.id: account
            for account in await account_store.lock_accounts(db, [source_account_id, recipient.id])
        }
        source = locked.get(source_account_id)
        destination = locked.get(recipient.id)
        
        if source is None:
            raise ResourceNotFoundError("Account", source_account_id)
        if destination is None:
            raise RecipientNotFoundError(recipient_mobile)
        
        # 3. Balance check against the locked row
        if source.balance < amount:
            raise InsufficientBalanceError(balance=source.balance, amount=amount)
        
        # 4. Move the money
        source.balance = source.balance - amount
        destination.balance = destination.balance + amount
        await account_store.save(db, source)
        await account_store.save(db, destination)
        
        # 5. Double entry
        transfer_id = str(uuid4())
        debit = LedgerEntry(
            transfer_id=transfer_id,
            account_id=source.id,
            counterparty_id=destination.id,
            counterparty_mobile=destination.mobile,
            amount=-amount,
            operation_type=LedgerOperationType.INTERNAL_TRANSFER,
            status=LedgerEntryStatus.COMPLETED,
        )
        credit = LedgerEntry(
            transfer_id=transfer_id,
            account_id=destination.id,
            counterparty_id=source.id,
            counterparty_mobile=source.mobile,
            amount=amount,
            operation_type=LedgerOperationType.INTERNAL_TRANSFER,
            status=LedgerEntryStatus.COMPLETED,
        )
        entries = await ledger.append(db, [debit, credit])
        
        return TransferResult(
            transfer_id=transfer_id,
            amount=amount,
            source_balance=Decimal(source.balance).quantize(TWO_PLACES),
            destination_balance=Decimal(destination.balance).quantize(TWO_PLACES),
            entries=entries,
        )
