"""
User Management API Endpoints.

Admin-only STAFF and CLIENT rosters, account creation and activation.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.models.enums import UserRole
from backend.app.schemas.admin import UserCreate, UserStatusUpdate, UserListResponse
from backend.app.schemas.auth import UserResponse
from backend.app.core.dependencies import get_data_access
from backend.app.core.guards import require_admin
from backend.app.domain.context import Actor
from backend.app.services import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    role: UserRole = Query(..., description="STAFF or CLIENT"),
    admin: Actor = Depends(require_admin),
    data=Depends(get_data_access)
):
    """
    List one roster (admin-only).

    Rosters never mix roles; ADMIN is not a valid roster.
    """
    users = await user_service.list_users(data, admin, role)
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in users],
        total=len(users)
    )


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    admin: Actor = Depends(require_admin),
    data=Depends(get_data_access),
    db: AsyncSession = Depends(get_db)
):
    """Create a STAFF or CLIENT account (admin-only)."""
    user = await user_service.create_user(
        data,
        db,
        admin,
        name=user_data.name,
        email=user_data.email,
        password=user_data.password,
        role=user_data.role,
        is_active=user_data.is_active,
        assigned_clients=user_data.assigned_clients,
        avatar=user_data.avatar,
    )
    return UserResponse.model_validate(user)


@router.put("/{user_id}/status", response_model=UserResponse)
async def update_user_status(
    user_id: str,
    request: UserStatusUpdate,
    admin: Actor = Depends(require_admin),
    data=Depends(get_data_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Activate or deactivate an account (admin-only).

    Deactivation immediately revokes the user's tokens.
    """
    user = await user_service.set_user_status(
        data, db, admin, user_id, request.is_active, reason=request.reason
    )
    return UserResponse.model_validate(user)
