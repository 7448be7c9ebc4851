"""
User Management Service.

Admin-only roster listing, account creation and activation toggling.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import AppException, InsufficientPermissionsError, InvalidRoleError
from backend.app.core.token_revocation import clear_user_token_revocation, revoke_all_user_tokens
from backend.app.domain.context import Actor
from backend.app.domain.visibility import can_manage_users, user_roster
from backend.app.models.enums import UserRole
from backend.app.models.notification import NotificationType
from backend.app.models.user import User
from backend.app.services.audit import AuditAction, log_event
from backend.app.services.notification_service import NotificationService

logger = logging.getLogger("eparcel")

MANAGED_ROLES = (UserRole.STAFF, UserRole.CLIENT)


async def list_users(data, actor: Actor, role: UserRole) -> List[User]:
    """One roster (STAFF or CLIENT) for an admin."""
    return user_roster(actor, await data.users.get_all(), role)


async def create_user(
    data,
    db: AsyncSession,
    actor: Actor,
    name: str,
    email: str,
    password: str,
    role: UserRole,
    is_active: bool = True,
    assigned_clients: Optional[Sequence[str]] = None,
    avatar: Optional[str] = None,
) -> User:
    """
    Create a STAFF or CLIENT account.

    Raises:
        InsufficientPermissionsError: actor is not an admin
        InvalidRoleError: role is ADMIN, or assigned_clients given for a non-staff user
        EmailAlreadyRegisteredError: email already in use
    """
    if not can_manage_users(actor):
        raise InsufficientPermissionsError("Admin access required")
    if role not in MANAGED_ROLES:
        raise InvalidRoleError("Only STAFF or CLIENT accounts can be created")
    if assigned_clients and role != UserRole.STAFF:
        raise InvalidRoleError("Only staff accounts can have assigned clients")

    try:
        user = await data.users.create(
            name=name,
            email=email,
            password=password,
            role=role,
            is_active=is_active,
            assigned_clients=assigned_clients,
            avatar=avatar,
        )
        await data.commit()
    except AppException:
        await data.rollback()
        raise

    logger.info("Admin %s created %s account %s", actor.id, role.value, user.id)
    await log_event(
        db=db,
        action=AuditAction.USER_CREATED,
        actor_id=actor.id,
        actor_username=actor.email,
        target_user_id=user.id,
        target_username=user.email,
        metadata={"role": role.value, "is_active": is_active},
    )
    return user


async def set_user_status(
    data,
    db: AsyncSession,
    actor: Actor,
    user_id: str,
    is_active: bool,
    reason: Optional[str] = None,
) -> User:
    """
    Activate or deactivate an account.

    Deactivation revokes every token the user holds. Activation clears
    that revocation and notifies the user (approving a self-registered
    client).

    Raises:
        InsufficientPermissionsError: actor is not an admin, or targets themselves
        ResourceNotFoundError: unknown user id
    """
    if not can_manage_users(actor):
        raise InsufficientPermissionsError("Admin access required")
    if user_id == actor.id:
        raise InsufficientPermissionsError("Cannot change your own account status")

    try:
        user = await data.users.toggle_status(user_id, is_active)
        await data.commit()
    except AppException:
        await data.rollback()
        raise

    if is_active:
        await clear_user_token_revocation(user_id)
        await NotificationService.create_notification(
            db,
            user_id=user_id,
            title="Account Activated",
            message="Your account has been approved. You can now sign in.",
            type=NotificationType.ACCOUNT,
        )
    else:
        await revoke_all_user_tokens(user_id)

    logger.info("Admin %s set user %s active=%s", actor.id, user_id, is_active)
    await log_event(
        db=db,
        action=AuditAction.USER_ACTIVATED if is_active else AuditAction.USER_DEACTIVATED,
        actor_id=actor.id,
        actor_username=actor.email,
        target_user_id=user.id,
        target_username=user.email,
        metadata={"reason": reason} if reason else None,
    )
    return user
