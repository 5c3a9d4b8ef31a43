"""
Authentication Pydantic schemas.

Defines request and response schemas for registration and login.
"""

from pydantic import BaseModel, Field

# Ten-digit mobile number, used as login name and transfer lookup key
MOBILE_PATTERN = r"^\d{10}$"


class AccountRegister(BaseModel):
    """
    Schema for account registration.
    
    Used by POST /register.
    """
    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    mobile: str = Field(..., pattern=MOBILE_PATTERN, description="10-digit mobile number")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")


class AccountLogin(BaseModel):
    """
    Schema for login.
    
    Used by POST /login.
    """
    mobile: str = Field(..., description="Registered mobile number")
    password: str = Field(..., description="Password")


class MessageResponse(BaseModel):
    message: str


class LoginResponse(BaseModel):
    """
    Schema for a successful login.
    
    ``userId`` keeps the camelCase name the frontend forms read.
    """
    message: str = "Login successful"
    token: str = Field(..., description="JWT bearer token")
    userId: int = Field(..., description="Account ID")
