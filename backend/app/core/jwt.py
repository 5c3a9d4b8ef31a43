"""
JWT token utilities for authentication.

Tokens identify a wallet account: ``user_id`` is the account ID the
transfer endpoints act on and ``mobile`` is its lookup key.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from backend.app.core.config import settings
from backend.app.models.account import Account


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a verified access token."""
    account_id: int
    mobile: str
    expires_at: datetime


def create_access_token(account: Account, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token for an account.
    
    Args:
        account: Account the token authenticates
        expires_delta: Optional custom lifetime (defaults to access_token_expire_minutes)
        
    Returns:
        Encoded JWT token string
        
    Example payload:
        {
            "sub": "9876543210",
            "user_id": 123,
            "mobile": "9876543210",
            "exp": 1234567890
        }
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    
    claims = {
        "sub": account.mobile,
        "user_id": account.id,
        "mobile": account.mobile,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[TokenClaims]:
    """
    Verify a JWT access token and extract the account identity.
    
    Bad signature, expiry, and missing or mistyped wallet claims all yield None.
    
    Args:
        token: JWT token string to decode
        
    Returns:
        TokenClaims if the token is valid, None otherwise
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None
    
    account_id = payload.get("user_id")
    mobile = payload.get("mobile")
    exp = payload.get("exp")
    if not isinstance(account_id, int) or isinstance(account_id, bool):
        return None
    if not isinstance(mobile, str) or payload.get("sub") != mobile:
        return None
    if not isinstance(exp, (int, float)):
        return None
    
    return TokenClaims(
        account_id=account_id,
        mobile=mobile,
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )
