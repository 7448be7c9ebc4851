"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
"""

from pydantic import EmailStr, Field
from typing import List, Optional
from backend.app.models.enums import UserRole
from backend.app.schemas.common import CamelModel


class UserRegister(CamelModel):
    """
    Schema for client self-registration.

    Used by POST /register. The role is always CLIENT and the account
    starts inactive; any role sent by the caller is ignored.
    """
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    name: Optional[str] = Field(default=None, max_length=255, description="Display name (defaults to the email local part)")


class UserLogin(CamelModel):
    """Schema for user login (POST /login)."""
    email: str = Field(..., description="Email address")
    password: str = Field(..., description="Password")


class UserResponse(CamelModel):
    """
    Public user representation.

    The password hash is never part of the response.
    """
    id: str
    name: str
    email: str
    role: UserRole
    is_active: bool
    assigned_clients: List[str] = []
    avatar: Optional[str] = None


class TokenResponse(CamelModel):
    """Returned by a successful login."""
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user: UserResponse
