"""
Wallet Pydantic schemas.

Defines request and response schemas for balance, transfer and history endpoints.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from backend.app.models.wallet_enums import LedgerOperationType, LedgerEntryStatus
from backend.app.schemas.auth import MOBILE_PATTERN


def _money(value: Decimal) -> str:
    return f"{value:.2f}"


class BalanceResponse(BaseModel):
    balance: Decimal

    @field_serializer("balance")
    def serialize_balance(self, value: Decimal) -> str:
        return _money(value)


class TransferRequest(BaseModel):
    """
    Schema for an internal transfer.
    
    The sender is never part of the body; it comes from the bearer token.
    Sign and precision of ``amount`` are checked by the transfer service so
    that they surface as 400 rather than 422.
    """
    recipient_mobile: str = Field(..., pattern=MOBILE_PATTERN, description="Recipient's 10-digit mobile number")
    amount: Decimal = Field(..., allow_inf_nan=False, description="Amount to transfer (2 decimal places)")

    model_config = ConfigDict(json_schema_extra={
        "example": {
            "recipient_mobile": "9876543210",
            "amount": "250.00"
        }
    })


class TransferResponse(BaseModel):
    message: str = "Internal transfer successful!"
    new_balance: Decimal
    transfer_id: str

    @field_serializer("new_balance")
    def serialize_new_balance(self, value: Decimal) -> str:
        return _money(value)


class LedgerEntryResponse(BaseModel):
    id: int
    transfer_id: str
    counterparty_mobile: str
    amount: Decimal
    operation_type: LedgerOperationType
    status: LedgerEntryStatus
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("amount")
    def serialize_amount(self, value: Decimal) -> str:
        return _money(value)


class LedgerHistoryResponse(BaseModel):
    entries: List[LedgerEntryResponse]
    total_count: int
    balance: Decimal

    @field_serializer("balance")
    def serialize_balance(self, value: Decimal) -> str:
        return _money(value)
