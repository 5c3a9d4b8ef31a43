"""
Ledger Entry database model.

Immutable double-entry records of balance movements.
"""

from sqlalchemy import Column, Integer, Numeric, ForeignKey, DateTime, Enum, String
from sqlalchemy.sql import func
from backend.app.db.session import Base
from backend.app.models.wallet_enums import LedgerOperationType, LedgerEntryStatus


class LedgerEntry(Base):
    """
    Ledger Entry model.
    
    Immutable record of a balance movement on one account.
    Double-entry principle: an internal transfer writes exactly two entries
    sharing a transfer_id (debit on the sender, credit on the recipient), with
    amounts that sum to zero.
    NO updates or deletions allowed.
    """
    __tablename__ = "ledger_entries"
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    
    # Linkage
    transfer_id = Column(String(36), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey('accounts.id'), nullable=False, index=True)
    counterparty_id = Column(Integer, ForeignKey('accounts.id'), nullable=True)
    counterparty_mobile = Column(String(20), nullable=False)
    
    # Financials (negative = debit, positive = credit)
    amount = Column(Numeric(12, 2), nullable=False)
    operation_type = Column(Enum(LedgerOperationType), nullable=False)
    status = Column(Enum(LedgerEntryStatus), default=LedgerEntryStatus.COMPLETED, nullable=False)
    
    # Timestamps (Immutable - no updated_at)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    
    def __repr__(self):
        return f"<LedgerEntry(id={self.id}, account_id={self.account_id}, amount={self.amount}, type='{self.operation_type.value}')>"
