"""
Visibility and authorization filter.

Pure functions deciding which parcels and users an actor may see and
which parcel actions are offered to them. Nothing here touches storage.

STAFF and ADMIN see every parcel. A staff member's `assigned_clients`
list is informational and is intentionally not applied here.
"""

from typing import Iterable, List, Optional, Sequence
from backend.app.core.exceptions import InsufficientPermissionsError, InvalidRoleError
from backend.app.domain.context import Actor
from backend.app.domain.status_machine import is_terminal
from backend.app.models.enums import UserRole
from backend.app.models.parcel_enums import ParcelAction, ParcelStatus

# Status filter value meaning "no status filter"
ALL_STATUSES = "All"

STAFF_ACTIONS = (
    ParcelAction.ACCEPT,
    ParcelAction.DISPATCH,
    ParcelAction.DECLINE,
    ParcelAction.DELETE,
)
CLIENT_ACTIONS = (
    ParcelAction.CONFIRM_RECEIPT,
    ParcelAction.REPORT_ISSUE,
)


def can_view_parcel(actor: Actor, parcel) -> bool:
    """A CLIENT sees only parcels addressed to them; STAFF and ADMIN see all."""
    if actor.role == UserRole.CLIENT:
        return parcel.client_id == actor.id
    return True


def _matches_status(parcel, status_filter) -> bool:
    if status_filter is None or status_filter == ALL_STATUSES:
        return True
    return parcel.status == ParcelStatus(status_filter)


def _matches_search(parcel, search: Optional[str]) -> bool:
    if not search:
        return True
    return search.lower() in parcel.tracking_number.lower()


def visible_parcels(
    actor: Actor,
    parcels: Iterable,
    search: Optional[str] = None,
    status_filter=None,
) -> List:
    """
    Filter parcels for an actor, keeping their original order.

    Applies, in order: role visibility, the optional status filter
    (skipped for "All"), and a case-insensitive substring search on the
    tracking number.
    """
    return [
        parcel
        for parcel in parcels
        if can_view_parcel(actor, parcel)
        and _matches_status(parcel, status_filter)
        and _matches_search(parcel, search)
    ]


def can_manage_users(actor: Actor) -> bool:
    return actor.role == UserRole.ADMIN


def user_roster(actor: Actor, users: Iterable, target_role: UserRole) -> List:
    """
    Users of exactly one role (STAFF or CLIENT roster) for the admin views.

    Raises:
        InsufficientPermissionsError: actor is not an admin
        InvalidRoleError: target_role is not STAFF or CLIENT
    """
    if not can_manage_users(actor):
        raise InsufficientPermissionsError("Admin access required")
    if target_role not in (UserRole.STAFF, UserRole.CLIENT):
        raise InvalidRoleError("Roster must be STAFF or CLIENT")
    return [user for user in users if user.role == target_role]


def offered_actions(actor: Actor, parcel) -> Sequence[ParcelAction]:
    """
    Actions a UI should offer for this parcel.

    Staff are offered every action regardless of status; the state machine
    rejects illegal ones when they are fired. Clients get Confirm Receipt and
    Report Issue on their own non-terminal parcels and never Delete.
    """
    if actor.role == UserRole.STAFF:
        return STAFF_ACTIONS
    if actor.role == UserRole.CLIENT:
        if parcel.client_id == actor.id and not is_terminal(parcel.status):
            return CLIENT_ACTIONS
    return ()
