"""
Notification Schemas.
"""

from datetime import datetime
from typing import Optional, Dict, Any
from backend.app.models.enums import UserRole
from backend.app.models.notification import NotificationType
from backend.app.schemas.common import CamelModel


class NotificationResponse(CamelModel):
    id: int
    type: NotificationType
    title: str
    message: str
    metadata_payload: Optional[Dict[str, Any]]
    is_read: bool
    created_at: datetime
    read_at: Optional[datetime]


class BroadcastRequest(CamelModel):
    role_filter: Optional[UserRole] = None  # None for all users
    type: NotificationType = NotificationType.INFO
    title: str
    message: str
