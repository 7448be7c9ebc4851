"""
Admin API Endpoints.

Audit trail access for administrators.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.schemas.admin import AuditTrailResponse, AuditLogResponse
from backend.app.core.guards import require_admin
from backend.app.domain.context import Actor
from backend.app.services.audit import get_audit_trail

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/audit-logs", response_model=AuditTrailResponse)
async def get_audit_logs(
    target_user_id: Optional[str] = Query(None, description="Filter by target user ID"),
    action: Optional[str] = Query(None, description="Filter by action type"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of logs"),
    admin: Actor = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Get audit trail logs (admin-only).

    Supports filtering by target user and action type. Most recent first.
    """
    logs = await get_audit_trail(
        db=db,
        target_user_id=target_user_id,
        action=action,
        limit=limit
    )

    return AuditTrailResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
