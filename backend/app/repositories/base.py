"""
Data access contract.

Defines the storage boundary the services depend on: ``UserGateway``,
``ParcelGateway`` and the ``DataAccess`` unit of work that bundles them
with an ``auth`` gateway. Two backends implement it: ``SqlDataAccess``
(SQLAlchemy, live) and ``InMemoryDataAccess`` (demo dataset).

Backends raise typed errors from backend.app.core.exceptions; they never
substitute fallback data for a failed operation.
"""

from datetime import date
from typing import List, Optional, Protocol, Sequence

from backend.app.core.exceptions import AccountInactiveError, InvalidCredentialsError
from backend.app.core.security import verify_password
from backend.app.models.enums import UserRole
from backend.app.models.parcel import Parcel
from backend.app.models.parcel_enums import ParcelStatus
from backend.app.models.user import User


class UserGateway(Protocol):
    """User storage operations."""

    async def get_all(self) -> List[User]:
        ...

    async def get(self, user_id: str) -> Optional[User]:
        ...

    async def get_by_email(self, email: str) -> Optional[User]:
        ...

    async def create(
        self,
        name: str,
        email: str,
        password: str,
        role: UserRole,
        is_active: bool = True,
        assigned_clients: Optional[Sequence[str]] = None,
        avatar: Optional[str] = None,
    ) -> User:
        """Create a user; the backend assigns the canonical id and hashes the password.

        Raises:
            EmailAlreadyRegisteredError: email already in use.
        """
        ...

    async def toggle_status(self, user_id: str, is_active: bool) -> User:
        """Set the active flag.

        Raises:
            ResourceNotFoundError: unknown user id.
        """
        ...


class ParcelGateway(Protocol):
    """Parcel storage operations."""

    async def get_all(self) -> List[Parcel]:
        ...

    async def get(self, parcel_id: str) -> Optional[Parcel]:
        ...

    async def create(
        self,
        tracking_number: str,
        sender: str,
        client_id: str,
        description: str,
        handled_by: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Parcel:
        """Create a parcel; status is always PENDING and the id is backend-assigned.

        Raises:
            DuplicateTrackingNumberError: tracking number already in use.
        """
        ...

    async def update_status(
        self,
        parcel_id: str,
        status: ParcelStatus,
        expected_version: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Parcel:
        """Persist a new status and stamp the update date.

        Raises:
            ResourceNotFoundError: unknown parcel id.
            ConcurrentModificationError: expected_version is stale.
        """
        ...

    async def delete(self, parcel_id: str) -> None:
        """Hard-delete a parcel.

        Raises:
            ResourceNotFoundError: unknown parcel id.
        """
        ...


class AuthGateway:
    """
    Credential checks on top of a UserGateway.

    Shared by both backends so login semantics cannot drift between them.
    """

    def __init__(self, users: UserGateway) -> None:
        self._users = users

    async def login(self, email: str, password: str) -> User:
        """
        Authenticate by email and password.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
            AccountInactiveError: credentials match but the account is inactive
        """
        user = await self._users.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()
        if not user.is_active:
            raise AccountInactiveError()
        return user

    async def register(self, name: str, email: str, password: str) -> User:
        """Self-registration: always a CLIENT, inactive until an admin approves."""
        return await self._users.create(
            name=name,
            email=email,
            password=password,
            role=UserRole.CLIENT,
            is_active=False,
        )


class DataAccess(Protocol):
    """Unit of work exposing the auth, users and parcels gateways."""

    auth: AuthGateway
    users: UserGateway
    parcels: ParcelGateway

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...
