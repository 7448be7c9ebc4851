"""
Parcel Status State Machine.

Defines the legal status transitions, which role may fire each one, and
the action labels that map onto them.

    PENDING ──Accept──▶ ACCEPTED ──Dispatch──▶ IN_TRANSIT
       │                   │                      │
       └──── Decline / Report Issue ──────────────┴──▶ DECLINED
       └──── Confirm Receipt ─────────────────────────▶ DELIVERED

DELIVERED and DECLINED are terminal.
"""

from datetime import date
from typing import Dict, FrozenSet, Optional, Tuple
from backend.app.core.exceptions import InvalidTransitionError, TransitionNotPermittedError
from backend.app.models.enums import UserRole
from backend.app.models.parcel_enums import ParcelAction, ParcelStatus

INITIAL_STATUS = ParcelStatus.PENDING

TERMINAL_STATUSES: FrozenSet[ParcelStatus] = frozenset({ParcelStatus.DELIVERED, ParcelStatus.DECLINED})

_NON_TERMINAL = (ParcelStatus.PENDING, ParcelStatus.ACCEPTED, ParcelStatus.IN_TRANSIT)

# (from, to) -> roles allowed to fire the edge
TRANSITIONS: Dict[Tuple[ParcelStatus, ParcelStatus], FrozenSet[UserRole]] = {
    (ParcelStatus.PENDING, ParcelStatus.ACCEPTED): frozenset({UserRole.STAFF}),
    (ParcelStatus.ACCEPTED, ParcelStatus.IN_TRANSIT): frozenset({UserRole.STAFF}),
    **{
        (source, ParcelStatus.DECLINED): frozenset({UserRole.STAFF, UserRole.CLIENT})
        for source in _NON_TERMINAL
    },
    **{
        (source, ParcelStatus.DELIVERED): frozenset({UserRole.CLIENT})
        for source in _NON_TERMINAL
    },
}

ACTION_TARGETS: Dict[ParcelAction, ParcelStatus] = {
    ParcelAction.ACCEPT: ParcelStatus.ACCEPTED,
    ParcelAction.DISPATCH: ParcelStatus.IN_TRANSIT,
    ParcelAction.DECLINE: ParcelStatus.DECLINED,
    ParcelAction.REPORT_ISSUE: ParcelStatus.DECLINED,
    ParcelAction.CONFIRM_RECEIPT: ParcelStatus.DELIVERED,
}


def is_terminal(status: ParcelStatus) -> bool:
    return status in TERMINAL_STATUSES


def allowed_targets(status: ParcelStatus, role: Optional[UserRole] = None) -> FrozenSet[ParcelStatus]:
    """Statuses reachable in one step from `status`, optionally for one role."""
    return frozenset(
        target
        for (source, target), roles in TRANSITIONS.items()
        if source == status and (role is None or role in roles)
    )


def action_target(action: ParcelAction) -> Optional[ParcelStatus]:
    """Target status of an action; None for actions that are not transitions (Delete)."""
    return ACTION_TARGETS.get(action)


def validate_transition(current: ParcelStatus, target: ParcelStatus, role: UserRole) -> bool:
    """
    Check that `role` may move a parcel from `current` to `target`.

    Re-requesting the current status is accepted as an idempotent
    re-application when the role could have reached it (or may still act
    on the parcel); the caller then only re-stamps the update date.

    Returns:
        True if the status changes, False for an idempotent re-application

    Raises:
        InvalidTransitionError: edge not in the transition table
        TransitionNotPermittedError: role not allowed on that edge
    """
    if current == target:
        reaching_roles = {
            r for (_, to), roles in TRANSITIONS.items() if to == target for r in roles
        }
        if role in reaching_roles or allowed_targets(current, role):
            return False
        raise TransitionNotPermittedError(role.value, current.value, target.value)

    roles = TRANSITIONS.get((current, target))
    if roles is None:
        raise InvalidTransitionError(current.value, target.value)
    if role not in roles:
        raise TransitionNotPermittedError(role.value, current.value, target.value)
    return True


def stamp_date(today: Optional[date] = None) -> date:
    """Date recorded as dateUpdated on every transition (date-only granularity)."""
    return today or date.today()
