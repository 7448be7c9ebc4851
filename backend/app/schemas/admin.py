"""
Admin API Schema Definitions.

Pydantic schemas for user management and audit endpoints.
"""

from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional, List
from backend.app.models.enums import UserRole
from backend.app.schemas.auth import UserResponse
from backend.app.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Schema for an admin creating a STAFF or CLIENT account."""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: UserRole = Field(..., description="STAFF or CLIENT")
    is_active: bool = True
    assigned_clients: List[str] = Field(default_factory=list, description="Client ids (STAFF only, informational)")
    avatar: Optional[str] = Field(None, max_length=500)


class UserStatusUpdate(CamelModel):
    """Schema for toggling a user's active flag."""
    is_active: bool
    reason: Optional[str] = Field(None, description="Reason (for audit log)")


class UserListResponse(CamelModel):
    """Schema for a user roster."""
    users: List[UserResponse]
    total: int


class AuditLogResponse(CamelModel):
    """Schema for audit log entry."""
    id: int
    actor_id: Optional[str]
    actor_username: Optional[str]
    action: str
    target_user_id: Optional[str]
    target_username: Optional[str]
    meta_data: Optional[dict]
    ip_address: Optional[str]
    timestamp: datetime


class AuditTrailResponse(CamelModel):
    """Schema for audit trail list."""
    logs: List[AuditLogResponse]
    total: int
