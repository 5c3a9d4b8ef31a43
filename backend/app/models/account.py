"""
Account database model.

A wallet account doubles as the login identity: the mobile number is both
the login name and the lookup key other users transfer money to.
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, CheckConstraint
from sqlalchemy.sql import func
from backend.app.db.session import Base


class Account(Base):
    """
    Account model holding the wallet balance.
    
    The balance is only changed by the transfer service, inside a
    transaction. ``version`` is bumped on every UPDATE and checked in the
    WHERE clause, so a write based on a stale read fails instead of
    overwriting a concurrent change.
    """
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_accounts_balance_non_negative"),
    )
    
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    mobile = Column(String(20), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    version = Column(Integer, nullable=False)
    
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
    
    __mapper_args__ = {"version_id_col": version}
    
    def __repr__(self):
        return f"<Account(id={self.id}, mobile='{self.mobile}', balance={self.balance})>"
