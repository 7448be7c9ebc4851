"""
Security guards for role-based access control.

Provides dependency factories for protecting endpoints by role.
"""

from typing import List
from fastapi import Depends, HTTPException, status
from backend.app.domain.context import Actor
from backend.app.models.enums import UserRole
from backend.app.core.dependencies import get_actor


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.post("/parcels")
        async def create_parcel(actor: Actor = Depends(require_role([UserRole.STAFF]))):
            ...

    Args:
        allowed_roles: Roles allowed to access the endpoint

    Returns:
        FastAPI dependency returning the Actor

    Raises:
        HTTPException 403 if the actor's role is not in allowed_roles
    """
    async def role_checker(actor: Actor = Depends(get_actor)) -> Actor:
        if actor.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )
        return actor

    return role_checker


async def require_admin(actor: Actor = Depends(get_actor)) -> Actor:
    """Dependency for admin-only endpoints."""
    if not actor.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return actor


async def require_staff(actor: Actor = Depends(get_actor)) -> Actor:
    """Dependency for staff-only endpoints (parcel registration and deletion)."""
    if not actor.is_staff:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff access required"
        )
    return actor
