"""
Notification API Endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from backend.app.db.session import get_db
from backend.app.core.dependencies import get_actor, get_data_access
from backend.app.core.guards import require_admin
from backend.app.domain.context import Actor
from backend.app.services.notification_service import NotificationService
from backend.app.schemas.notification import NotificationResponse, BroadcastRequest

router = APIRouter(prefix="/notifications", tags=["Notifications"])
admin_router = APIRouter(prefix="/admin/notifications", tags=["Admin - Notifications"])


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    unread_only: bool = Query(False),
    limit: int = Query(50, ge=1, le=200),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db)
):
    """List current user's notifications, newest first."""
    return await NotificationService.list_for_user(db, actor.id, unread_only=unread_only, limit=limit)


@router.patch("/read-all")
async def mark_all_notifications_read(
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db)
):
    """Mark all notifications as read."""
    count = await NotificationService.mark_all_read(db, actor.id)
    await db.commit()
    return {"status": "success", "count": count}


@router.patch("/{notification_id}/read")
async def mark_notification_read(
    notification_id: int = Path(...),
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db)
):
    """Mark a specific notification as read."""
    success = await NotificationService.mark_read(db, notification_id, actor.id)
    if not success:
        raise HTTPException(status_code=404, detail="Notification not found")

    await db.commit()
    return {"status": "success"}


# --- Admin Broadcast ---

@admin_router.post("/broadcast")
async def broadcast_notification(
    req: BroadcastRequest,
    admin: Actor = Depends(require_admin),
    data=Depends(get_data_access),
    db: AsyncSession = Depends(get_db)
):
    """Send a notification to every active user, or every active user of one role."""
    count = await NotificationService.broadcast(
        db, await data.users.get_all(), req.title, req.message, req.role_filter, req.type
    )
    await db.commit()
    return {"status": "success", "recipients": count}
