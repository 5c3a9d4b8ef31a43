"""
Authentication API endpoints.

Provides register and login for the wallet frontend.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.schemas.auth import AccountRegister, AccountLogin, LoginResponse, MessageResponse
from backend.app.core.jwt import create_access_token
from backend.app.domain.wallet.account_service import AccountService

router = APIRouter(tags=["Authentication"])


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(
    account_data: AccountRegister,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new account.
    
    New accounts start with the configured opening balance.
    Returns 409 if the mobile number is already registered.
    """
    await AccountService.register(
        db,
        name=account_data.name,
        mobile=account_data.mobile,
        password=account_data.password,
    )
    
    return MessageResponse(message="Registration successful. Please log in.")


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: AccountLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    Login and return a JWT bearer token.
    
    The token carries the account ID and mobile and expires after
    ``access_token_expire_minutes``.
    """
    account = await AccountService.authenticate(db, credentials.mobile, credentials.password)
    
    access_token = create_access_token(account)
    
    return LoginResponse(token=access_token, userId=account.id)
