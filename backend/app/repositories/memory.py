"""
In-memory data access backend.

Holds the demo dataset in process memory. Selected with
USE_MOCK_BACKEND=true; useful for demos and for exercising the services
without a database. Each gateway call applies atomically, so commit and
rollback have nothing to do.
"""

import asyncio
from datetime import date
from typing import Dict, List, Optional, Sequence

from backend.app.core.exceptions import (
    ConcurrentModificationError,
    DuplicateTrackingNumberError,
    EmailAlreadyRegisteredError,
    ResourceNotFoundError,
)
from backend.app.core.security import get_password_hash
from backend.app.db.ids import new_parcel_id, new_user_id
from backend.app.domain.status_machine import INITIAL_STATUS, stamp_date
from backend.app.models.enums import UserRole
from backend.app.models.parcel import Parcel
from backend.app.models.parcel_enums import ParcelStatus
from backend.app.models.user import User
from backend.app.repositories.base import AuthGateway
from backend.app.repositories.demo_data import build_demo_parcels, build_demo_users


class InMemoryStore:
    """Process-wide record storage, ordered newest parcel first."""

    def __init__(self, seed: bool = True, latency: float = 0.0) -> None:
        self.users: Dict[str, User] = {}
        self.parcels: List[Parcel] = []
        self.latency = latency
        if seed:
            for user in build_demo_users():
                self.users[user.id] = user
            self.parcels = build_demo_parcels(with_version=True)

    async def pause(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)


class InMemoryUserGateway:

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_all(self) -> List[User]:
        await self._store.pause()
        return list(self._store.users.values())

    async def get(self, user_id: str) -> Optional[User]:
        return self._store.users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        email = email.lower()
        return next((u for u in self._store.users.values() if u.email.lower() == email), None)

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
        await self._store.pause()
        if await self.get_by_email(email):
            raise EmailAlreadyRegisteredError(email)
        user = User(
            id=new_user_id(),
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            is_active=is_active,
            assigned_clients=list(assigned_clients or []),
            avatar=avatar,
        )
        self._store.users[user.id] = user
        return user

    async def toggle_status(self, user_id: str, is_active: bool) -> User:
        await self._store.pause()
        user = self._store.users.get(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        user.is_active = is_active
        return user


class InMemoryParcelGateway:

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_all(self) -> List[Parcel]:
        await self._store.pause()
        return list(self._store.parcels)

    async def get(self, parcel_id: str) -> Optional[Parcel]:
        return next((p for p in self._store.parcels if p.id == parcel_id), None)

    async def create(
        self,
        tracking_number: str,
        sender: str,
        client_id: str,
        description: str,
        handled_by: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Parcel:
        await self._store.pause()
        if any(p.tracking_number == tracking_number for p in self._store.parcels):
            raise DuplicateTrackingNumberError(tracking_number)
        stamped = stamp_date(today)
        parcel = Parcel(
            id=new_parcel_id(),
            tracking_number=tracking_number,
            sender=sender,
            client_id=client_id,
            description=description,
            handled_by=handled_by,
            status=INITIAL_STATUS,
            date_created=stamped,
            date_updated=stamped,
            version=1,
        )
        self._store.parcels.insert(0, parcel)
        return parcel

    async def update_status(
        self,
        parcel_id: str,
        status: ParcelStatus,
        expected_version: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Parcel:
        await self._store.pause()
        parcel = await self.get(parcel_id)
        if parcel is None:
            raise ResourceNotFoundError("Parcel", parcel_id)
        if expected_version is not None and expected_version != parcel.version:
            raise ConcurrentModificationError(parcel_id, expected_version, parcel.version)
        stamped = stamp_date(today)
        if parcel.status != status or parcel.date_updated != stamped:
            parcel.status = status
            parcel.date_updated = stamped
            parcel.version += 1
        return parcel

    async def delete(self, parcel_id: str) -> None:
        await self._store.pause()
        parcel = await self.get(parcel_id)
        if parcel is None:
            raise ResourceNotFoundError("Parcel", parcel_id)
        self._store.parcels.remove(parcel)


class InMemoryDataAccess:
    """DataAccess over an InMemoryStore."""

    def __init__(self, store: InMemoryStore) -> None:
        self.users = InMemoryUserGateway(store)
        self.parcels = InMemoryParcelGateway(store)
        self.auth = AuthGateway(self.users)

    async def commit(self) -> None:
        return None

    async def rollback(self) -> None:
        return None
