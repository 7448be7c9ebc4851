"""
Authentication Service.

Login, self-registration and logout. Every outcome is written to the
audit log; failed logins are logged before the error propagates.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import AccountInactiveError, AppException, InvalidCredentialsError
from backend.app.core.jwt import create_token_for_user
from backend.app.core.token_revocation import revoke_token
from backend.app.models.enums import UserRole
from backend.app.models.notification import NotificationType
from backend.app.models.user import User
from backend.app.services.audit import AuditAction, log_event
from backend.app.services.notification_service import NotificationService

logger = logging.getLogger("eparcel")


async def login(
    data,
    db: AsyncSession,
    email: str,
    password: str,
    ip_address: Optional[str] = None,
) -> Tuple[str, User]:
    """
    Authenticate and issue an access token.

    Returns:
        (access_token, user)

    Raises:
        InvalidCredentialsError: unknown email or wrong password
        AccountInactiveError: account exists but is inactive; no token is issued
    """
    try:
        user = await data.auth.login(email, password)
    except (InvalidCredentialsError, AccountInactiveError) as e:
        logger.warning("Login failed for %s: %s", email, e.message)
        await log_event(
            db=db,
            action=AuditAction.LOGIN_FAILED,
            actor_username=email,
            metadata={"reason": e.error_code},
            ip_address=ip_address,
        )
        raise

    token = create_token_for_user(user)
    await log_event(
        db=db,
        action=AuditAction.LOGIN_SUCCESS,
        actor_id=user.id,
        actor_username=user.email,
        ip_address=ip_address,
    )
    return token, user


async def register(
    data,
    db: AsyncSession,
    email: str,
    password: str,
    name: Optional[str] = None,
) -> User:
    """
    Self-register a client account.

    The account is always CLIENT and inactive until an admin activates it.
    Every active admin gets a "New Client Registration" notification.

    Raises:
        EmailAlreadyRegisteredError: email already in use
    """
    display_name = name or email.split("@")[0]
    try:
        user = await data.auth.register(display_name, email, password)
        await data.commit()
    except AppException:
        await data.rollback()
        raise

    logger.info("Client %s registered, pending approval", user.id)

    admins = [u for u in await data.users.get_all() if u.role == UserRole.ADMIN and u.is_active]
    await NotificationService.notify_many(
        db,
        [admin.id for admin in admins],
        title="New Client Registration",
        message=f"{user.name} ({user.email}) requested account approval.",
        type=NotificationType.ACCOUNT,
        metadata={"user_id": user.id},
    )
    await log_event(
        db=db,
        action=AuditAction.CLIENT_REGISTERED,
        actor_id=user.id,
        actor_username=user.email,
        target_user_id=user.id,
        target_username=user.email,
    )
    return user


async def logout(db: AsyncSession, current_user: dict) -> bool:
    """Revoke the caller's token. Returns False if the revocation store was unavailable."""
    revoked = await revoke_token(current_user["token"], current_user["user_id"])
    await log_event(
        db=db,
        action=AuditAction.LOGOUT,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        metadata={"token_revoked": revoked},
    )
    return revoked
