"""
Request actor context.

Every service call receives the acting user's identity explicitly
instead of reading it from shared session state.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel
from backend.app.models.enums import UserRole


class Actor(BaseModel):
    """The authenticated user performing the current request."""
    id: str
    role: UserRole
    email: Optional[str] = None

    @classmethod
    def from_token(cls, payload: Dict[str, Any]) -> "Actor":
        return cls(id=payload["user_id"], role=UserRole(payload["role"]), email=payload.get("sub"))

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role == UserRole.STAFF

    @property
    def is_client(self) -> bool:
        return self.role == UserRole.CLIENT
