"""
Authentication dependencies for FastAPI.

This module provides the dependency that resolves a bearer token to the
caller's account ID.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from backend.app.core.exceptions import AuthenticationError
from backend.app.core.jwt import decode_access_token

# HTTP Bearer security scheme; missing headers are reported as 401 below
security = HTTPBearer(auto_error=False)


async def get_current_account_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """
    FastAPI dependency for JWT authentication.
    
    The returned ID is the only source of the caller's identity; request
    bodies never name the sender.
    
    Args:
        credentials: HTTP Bearer token from request header
        
    Returns:
        Account ID from the token claims
        
    Raises:
        AuthenticationError: 401 if the token is missing, invalid or expired
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Not authorized, login required.")
    
    claims = decode_access_token(credentials.credentials)
    if claims is None:
        raise AuthenticationError("Session expired or token invalid. Please log in again.")
    
    return claims.account_id
