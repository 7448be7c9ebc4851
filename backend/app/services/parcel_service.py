"""
Parcel Service.

Orchestrates parcel reads and writes for one actor: visibility filter,
state machine guard, persistence through the data-access backend, then
audit logging and notifications once the write is committed.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import (
    AppException,
    InsufficientPermissionsError,
    InvalidRoleError,
    ResourceNotFoundError,
)
from backend.app.domain.context import Actor
from backend.app.domain.status_machine import validate_transition
from backend.app.domain.visibility import can_view_parcel, offered_actions, visible_parcels
from backend.app.models.enums import UserRole
from backend.app.models.notification import NotificationType
from backend.app.models.parcel import Parcel
from backend.app.models.parcel_enums import ParcelAction, ParcelStatus
from backend.app.services.audit import AuditAction, log_event
from backend.app.services.notification_service import NotificationService
from backend.app.services.request_guard import parcel_action_guard

logger = logging.getLogger("eparcel")

# Client-facing notification title per new status
STATUS_TITLES = {
    ParcelStatus.ACCEPTED: "Parcel Accepted",
    ParcelStatus.IN_TRANSIT: "Out for Delivery",
    ParcelStatus.DELIVERED: "Parcel Delivered",
    ParcelStatus.DECLINED: "Parcel Declined",
}


async def list_parcels(
    data,
    actor: Actor,
    search: Optional[str] = None,
    status_filter: Optional[str] = None,
) -> List[Parcel]:
    """Parcels visible to the actor, newest first, filtered by status and tracking number."""
    parcels = await data.parcels.get_all()
    return visible_parcels(actor, parcels, search=search, status_filter=status_filter)


async def get_parcel(data, actor: Actor, parcel_id: str) -> Parcel:
    """
    Load one parcel the actor may see.

    Parcels outside the actor's visibility are reported as missing so a
    client cannot probe for other clients' ids.
    """
    parcel = await data.parcels.get(parcel_id)
    if parcel is None or not can_view_parcel(actor, parcel):
        raise ResourceNotFoundError("Parcel", parcel_id)
    return parcel


async def get_parcel_actions(data, actor: Actor, parcel_id: str) -> Tuple[Parcel, Sequence[ParcelAction]]:
    parcel = await get_parcel(data, actor, parcel_id)
    return parcel, offered_actions(actor, parcel)


async def create_parcel(
    data,
    db: AsyncSession,
    actor: Actor,
    tracking_number: str,
    client_id: str,
    sender: str = "",
    description: str = "",
    today: Optional[date] = None,
) -> Parcel:
    """
    Register a parcel for a client. Status is always Pending.

    Raises:
        InsufficientPermissionsError: actor is not STAFF
        ResourceNotFoundError: unknown client id
        InvalidRoleError: client_id does not belong to a CLIENT
        DuplicateTrackingNumberError: tracking number already in use
    """
    if not actor.is_staff:
        raise InsufficientPermissionsError("Only staff can register parcels")

    client = await data.users.get(client_id)
    if client is None:
        raise ResourceNotFoundError("Client", client_id)
    if client.role != UserRole.CLIENT:
        raise InvalidRoleError(f"User {client_id} is not a client")

    try:
        parcel = await data.parcels.create(
            tracking_number=tracking_number,
            sender=sender,
            client_id=client_id,
            description=description,
            handled_by=actor.id,
            today=today,
        )
        await data.commit()
    except AppException:
        await data.rollback()
        raise

    logger.info("Parcel %s (%s) registered by %s", parcel.id, parcel.tracking_number, actor.id)

    await NotificationService.create_notification(
        db,
        user_id=client_id,
        title="New Parcel Registered",
        message=f"Parcel {parcel.tracking_number} from {sender or 'a sender'} has been registered for you.",
        type=NotificationType.PARCEL_UPDATE,
        metadata={"parcel_id": parcel.id, "tracking_number": parcel.tracking_number},
    )
    await log_event(
        db=db,
        action=AuditAction.PARCEL_CREATED,
        actor_id=actor.id,
        actor_username=actor.email,
        target_user_id=client_id,
        target_username=client.email,
        metadata={"parcel_id": parcel.id, "tracking_number": parcel.tracking_number},
    )
    return parcel


async def transition_parcel(
    data,
    db: AsyncSession,
    actor: Actor,
    parcel_id: str,
    target: ParcelStatus,
    expected_version: Optional[int] = None,
    today: Optional[date] = None,
) -> Parcel:
    """
    Move a parcel to a new status.

    The write goes to the backend first and is committed only if it
    succeeds; on any typed failure the unit of work is rolled back and the
    error propagates. Requesting the current status again only re-stamps
    dateUpdated.

    Raises:
        DuplicateRequestError: another request for this parcel is in flight
        ResourceNotFoundError: unknown or invisible parcel
        InvalidTransitionError: edge not in the transition table
        TransitionNotPermittedError: role may not fire the edge
        ConcurrentModificationError: expected_version is stale
        DataAccessError: the backend failed
    """
    async with parcel_action_guard(parcel_id):
        parcel = await get_parcel(data, actor, parcel_id)
        previous = parcel.status
        changed = validate_transition(previous, target, actor.role)

        try:
            parcel = await data.parcels.update_status(
                parcel_id,
                target,
                expected_version=expected_version,
                today=today,
            )
            await data.commit()
        except AppException as e:
            logger.warning("Transition of parcel %s to %s failed: %s", parcel_id, target.value, e.message)
            await data.rollback()
            raise

    if not changed:
        logger.info("Parcel %s re-applied status %s", parcel_id, target.value)
        return parcel

    logger.info("Parcel %s moved %s -> %s by %s", parcel_id, previous.value, target.value, actor.id)
    await _notify_transition(db, actor, parcel, previous)
    await log_event(
        db=db,
        action=AuditAction.PARCEL_STATUS_CHANGED,
        actor_id=actor.id,
        actor_username=actor.email,
        target_user_id=parcel.client_id,
        metadata={
            "parcel_id": parcel.id,
            "tracking_number": parcel.tracking_number,
            "from": previous.value,
            "to": target.value,
        },
    )
    return parcel


async def _notify_transition(db: AsyncSession, actor: Actor, parcel: Parcel, previous: ParcelStatus) -> None:
    metadata = {
        "parcel_id": parcel.id,
        "tracking_number": parcel.tracking_number,
        "from": previous.value,
        "to": parcel.status.value,
    }
    if actor.id != parcel.client_id:
        await NotificationService.create_notification(
            db,
            user_id=parcel.client_id,
            title=STATUS_TITLES.get(parcel.status, "Parcel Update"),
            message=f"Parcel {parcel.tracking_number} is now {parcel.status.value}.",
            type=NotificationType.PARCEL_UPDATE,
            metadata=metadata,
        )
    elif parcel.handled_by:
        # Client confirmed receipt or reported an issue: tell the handling staff member
        await NotificationService.create_notification(
            db,
            user_id=parcel.handled_by,
            title=STATUS_TITLES.get(parcel.status, "Parcel Update"),
            message=f"Client marked parcel {parcel.tracking_number} as {parcel.status.value}.",
            type=NotificationType.PARCEL_UPDATE,
            metadata=metadata,
        )


async def delete_parcel(data, db: AsyncSession, actor: Actor, parcel_id: str) -> None:
    """
    Hard-delete a parcel (STAFF only).

    Raises:
        InsufficientPermissionsError: actor is not STAFF
        ResourceNotFoundError: unknown parcel id
    """
    if not actor.is_staff:
        raise InsufficientPermissionsError("Only staff can delete parcels")

    async with parcel_action_guard(parcel_id):
        parcel = await get_parcel(data, actor, parcel_id)
        tracking_number = parcel.tracking_number
        client_id = parcel.client_id
        try:
            await data.parcels.delete(parcel_id)
            await data.commit()
        except AppException:
            await data.rollback()
            raise

    logger.info("Parcel %s (%s) deleted by %s", parcel_id, tracking_number, actor.id)
    await log_event(
        db=db,
        action=AuditAction.PARCEL_DELETED,
        actor_id=actor.id,
        actor_username=actor.email,
        target_user_id=client_id,
        metadata={"parcel_id": parcel_id, "tracking_number": tracking_number},
    )
