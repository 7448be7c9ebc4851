"""
Notification Service.

Handles creation and state management of in-app notifications.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, desc
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Iterable, List

from backend.app.models.enums import UserRole
from backend.app.models.notification import Notification, NotificationType


class NotificationService:

    @staticmethod
    async def create_notification(
        db: AsyncSession,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Notification:
        """Create a single notification. Caller commits."""
        notif = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            metadata_payload=metadata
        )
        db.add(notif)
        await db.flush()
        return notif

    @staticmethod
    async def notify_many(
        db: AsyncSession,
        user_ids: Iterable[str],
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        metadata: Optional[Dict[str, Any]] = None
    ) -> int:
        """Create the same notification for several users. Caller commits."""
        notifications = [
            Notification(
                user_id=uid,
                title=title,
                message=message,
                type=type,
                metadata_payload=metadata
            )
            for uid in user_ids
        ]
        if notifications:
            db.add_all(notifications)
            await db.flush()
        return len(notifications)

    @staticmethod
    async def broadcast(
        db: AsyncSession,
        users: Iterable,
        title: str,
        message: str,
        role: Optional[UserRole] = None,
        type: NotificationType = NotificationType.INFO
    ) -> int:
        """Notify every active user, optionally only one role. Caller commits."""
        recipients = [
            u.id for u in users
            if u.is_active and (role is None or u.role == role)
        ]
        return await NotificationService.notify_many(db, recipients, title, message, type)

    @staticmethod
    async def list_for_user(
        db: AsyncSession,
        user_id: str,
        unread_only: bool = False,
        limit: int = 50
    ) -> List[Notification]:
        query = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            query = query.where(Notification.is_read == False)
        query = query.order_by(desc(Notification.created_at), desc(Notification.id)).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def mark_read(db: AsyncSession, notification_id: int, user_id: str) -> bool:
        """Mark a notification as read."""
        stmt = update(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id
        ).values(
            is_read=True,
            read_at=datetime.now(timezone.utc)
        )
        result = await db.execute(stmt)
        return result.rowcount > 0

    @staticmethod
    async def mark_all_read(db: AsyncSession, user_id: str) -> int:
        """Mark all notifications for user as read."""
        stmt = update(Notification).where(
            Notification.user_id == user_id,
            Notification.is_read == False
        ).values(
            is_read=True,
            read_at=datetime.now(timezone.utc)
        )
        result = await db.execute(stmt)
        return result.rowcount
