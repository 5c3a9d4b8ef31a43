"""
Wallet enumerations.
"""

import enum


class LedgerOperationType(str, enum.Enum):
    """Kind of balance-affecting event a ledger entry records."""
    INTERNAL_TRANSFER = "INTERNAL_TRANSFER"  # Peer-to-peer transfer between two accounts
    WITHDRAW = "WITHDRAW"
    DEPOSIT = "DEPOSIT"
    API_PAYOUT = "API_PAYOUT"  # Payout to an external provider


class LedgerEntryStatus(str, enum.Enum):
    """Ledger entry status enumeration."""
    COMPLETED = "COMPLETED"
    PENDING = "PENDING"
    FAILED = "FAILED"
