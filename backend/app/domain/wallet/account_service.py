"""
Account Service (Domain Logic).

Registration and credential checks.
"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.exceptions import AuthenticationError, DuplicateAccountError
from backend.app.core.observability import get_correlation_id
from backend.app.core.security import get_password_hash, verify_password
from backend.app.db.session import transaction_scope
from backend.app.domain.wallet import account_store
from backend.app.models.account import Account

logger = logging.getLogger("wallet.accounts")


class AccountService:
    
    @staticmethod
    async def register(db: AsyncSession, name: str, mobile: str, password: str) -> Account:
        """
        Create an account funded with the configured opening balance.
        
        Raises:
            DuplicateAccountError: If the mobile number is already registered
        """
        try:
            async with transaction_scope(db):
                if await account_store.find_by_key(db, mobile) is not None:
                    raise DuplicateAccountError(mobile)
                
                account = await account_store.create(
                    db,
                    name=name,
                    mobile=mobile,
                    hashed_password=get_password_hash(password),
                    opening_balance=settings.opening_balance,
                )
        except IntegrityError as exc:
            # Lost a race with a concurrent registration of the same mobile
            raise DuplicateAccountError(mobile) from exc
        
        logger.info("Account registered", extra={
            "account_id": account.id,
            "mobile": mobile,
            "correlation_id": get_correlation_id(),
        })
        return account
    
    @staticmethod
    async def authenticate(db: AsyncSession, mobile: str, password: str) -> Account:
        """
        Return the account whose credentials match.
        
        Unknown mobile and wrong password fail with the same message.
        
        Raises:
            AuthenticationError: If the credentials do not match
        """
        account = await account_store.find_by_key(db, mobile)
        
        if account is None or not verify_password(password, account.hashed_password):
            logger.warning("Login failed", extra={"mobile": mobile, "correlation_id": get_correlation_id()})
            raise AuthenticationError("Invalid credentials.")
        
        return account
