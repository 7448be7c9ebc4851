"""
SQLAlchemy data access backend.

Gateways flush their writes; the service decides when to commit or roll
back through ``SqlDataAccess``. Driver errors surface as DataAccessError.
"""

import logging
from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from backend.app.core.exceptions import (
    ConcurrentModificationError,
    DataAccessError,
    DuplicateTrackingNumberError,
    EmailAlreadyRegisteredError,
    ResourceNotFoundError,
)
from backend.app.core.security import get_password_hash
from backend.app.domain.status_machine import INITIAL_STATUS, stamp_date
from backend.app.models.enums import UserRole
from backend.app.models.parcel import Parcel
from backend.app.models.parcel_enums import ParcelStatus
from backend.app.models.user import User
from backend.app.repositories.base import AuthGateway

logger = logging.getLogger("eparcel")


class SqlUserGateway:

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_all(self) -> List[User]:
        try:
            result = await self._db.execute(select(User).order_by(User.created_at, User.id))
        except SQLAlchemyError as e:
            raise DataAccessError("users.get_all") from e
        return list(result.scalars().all())

    async def get(self, user_id: str) -> Optional[User]:
        try:
            result = await self._db.execute(select(User).where(User.id == user_id))
        except SQLAlchemyError as e:
            raise DataAccessError("users.get") from e
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        try:
            result = await self._db.execute(
                select(User).where(func.lower(User.email) == email.lower())
            )
        except SQLAlchemyError as e:
            raise DataAccessError("users.get_by_email") from e
        return result.scalar_one_or_none()

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
        if await self.get_by_email(email):
            raise EmailAlreadyRegisteredError(email)

        user = User(
            name=name,
            email=email,
            hashed_password=get_password_hash(password),
            role=role,
            is_active=is_active,
            assigned_clients=list(assigned_clients or []),
            avatar=avatar,
        )
        self._db.add(user)
        try:
            await self._db.flush()
        except IntegrityError as e:
            raise EmailAlreadyRegisteredError(email) from e
        except SQLAlchemyError as e:
            raise DataAccessError("users.create") from e
        return user

    async def toggle_status(self, user_id: str, is_active: bool) -> User:
        user = await self.get(user_id)
        if user is None:
            raise ResourceNotFoundError("User", user_id)
        user.is_active = is_active
        try:
            await self._db.flush()
        except SQLAlchemyError as e:
            raise DataAccessError("users.toggle_status") from e
        return user


class SqlParcelGateway:

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def get_all(self) -> List[Parcel]:
        try:
            result = await self._db.execute(
                select(Parcel).order_by(Parcel.created_at.desc(), Parcel.id)
            )
        except SQLAlchemyError as e:
            raise DataAccessError("parcels.get_all") from e
        return list(result.scalars().all())

    async def get(self, parcel_id: str) -> Optional[Parcel]:
        try:
            result = await self._db.execute(select(Parcel).where(Parcel.id == parcel_id))
        except SQLAlchemyError as e:
            raise DataAccessError("parcels.get") from e
        return result.scalar_one_or_none()

    async def _tracking_number_taken(self, tracking_number: str) -> bool:
        result = await self._db.execute(
            select(Parcel.id).where(Parcel.tracking_number == tracking_number)
        )
        return result.first() is not None

    async def create(
        self,
        tracking_number: str,
        sender: str,
        client_id: str,
        description: str,
        handled_by: Optional[str] = None,
        today: Optional[date] = None,
    ) -> Parcel:
        if await self._tracking_number_taken(tracking_number):
            raise DuplicateTrackingNumberError(tracking_number)

        stamped = stamp_date(today)
        parcel = Parcel(
            tracking_number=tracking_number,
            sender=sender,
            client_id=client_id,
            description=description,
            handled_by=handled_by,
            status=INITIAL_STATUS,
            date_created=stamped,
            date_updated=stamped,
        )
        self._db.add(parcel)
        try:
            await self._db.flush()
        except IntegrityError as e:
            raise DuplicateTrackingNumberError(tracking_number) from e
        except SQLAlchemyError as e:
            raise DataAccessError("parcels.create") from e
        await self._db.refresh(parcel)
        return parcel

    async def update_status(
        self,
        parcel_id: str,
        status: ParcelStatus,
        expected_version: Optional[int] = None,
        today: Optional[date] = None,
    ) -> Parcel:
        parcel = await self.get(parcel_id)
        if parcel is None:
            raise ResourceNotFoundError("Parcel", parcel_id)
        if expected_version is not None and expected_version != parcel.version:
            raise ConcurrentModificationError(parcel_id, expected_version, parcel.version)

        current_version = parcel.version
        parcel.status = status
        parcel.date_updated = stamp_date(today)
        try:
            await self._db.flush()
        except StaleDataError as e:
            raise ConcurrentModificationError(parcel_id, current_version, current_version + 1) from e
        except SQLAlchemyError as e:
            raise DataAccessError("parcels.update_status") from e
        return parcel

    async def delete(self, parcel_id: str) -> None:
        parcel = await self.get(parcel_id)
        if parcel is None:
            raise ResourceNotFoundError("Parcel", parcel_id)
        try:
            await self._db.delete(parcel)
            await self._db.flush()
        except SQLAlchemyError as e:
            raise DataAccessError("parcels.delete") from e


class SqlDataAccess:
    """DataAccess bound to one AsyncSession (one request)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.users = SqlUserGateway(db)
        self.parcels = SqlParcelGateway(db)
        self.auth = AuthGateway(self.users)

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            logger.error("Commit failed, rolling back: %s", e)
            await self.db.rollback()
            raise DataAccessError("commit") from e

    async def rollback(self) -> None:
        await self.db.rollback()
