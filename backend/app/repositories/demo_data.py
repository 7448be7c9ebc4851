"""
Demo dataset.

Seeds the in-memory backend and, through backend/seed_users.py, a fresh
database. Every demo account uses the password "password".
"""

from datetime import date
from functools import lru_cache
from typing import List

from backend.app.core.security import get_password_hash
from backend.app.models.enums import UserRole
from backend.app.models.parcel import Parcel
from backend.app.models.parcel_enums import ParcelStatus
from backend.app.models.user import User

DEMO_PASSWORD = "password"

DEMO_USERS = [
    {"id": "u1", "name": "Admin User", "email": "admin@eparcel.com", "role": UserRole.ADMIN, "is_active": True},
    {"id": "u2", "name": "John Staff", "email": "john@eparcel.com", "role": UserRole.STAFF, "is_active": True, "assigned_clients": ["u4"]},
    {"id": "u3", "name": "Sarah Staff", "email": "sarah@eparcel.com", "role": UserRole.STAFF, "is_active": False, "assigned_clients": []},
    {"id": "u4", "name": "Client A Corp", "email": "clienta@corp.com", "role": UserRole.CLIENT, "is_active": True},
    {"id": "u5", "name": "Client B Ltd", "email": "clientb@ltd.com", "role": UserRole.CLIENT, "is_active": True},
]

DEMO_PARCELS = [
    {"id": "p1", "tracking_number": "EP-8832", "sender": "Warehouse A", "client_id": "u4", "description": "Electronics",
     "status": ParcelStatus.DELIVERED, "date_created": date(2023, 10, 1), "date_updated": date(2023, 10, 5), "handled_by": "u2"},
    {"id": "p2", "tracking_number": "EP-9941", "sender": "Warehouse B", "client_id": "u4", "description": "Documents",
     "status": ParcelStatus.PENDING, "date_created": date(2023, 10, 25), "date_updated": date(2023, 10, 25), "handled_by": None},
    {"id": "p3", "tracking_number": "EP-1122", "sender": "Supplier X", "client_id": "u5", "description": "Furniture",
     "status": ParcelStatus.IN_TRANSIT, "date_created": date(2023, 10, 24), "date_updated": date(2023, 10, 26), "handled_by": "u2"},
    {"id": "p4", "tracking_number": "EP-3344", "sender": "Amazon", "client_id": "u4", "description": "Books",
     "status": ParcelStatus.DECLINED, "date_created": date(2023, 10, 20), "date_updated": date(2023, 10, 21), "handled_by": "u3"},
]


@lru_cache(maxsize=1)
def demo_password_hash() -> str:
    # bcrypt is slow; hash once per process
    return get_password_hash(DEMO_PASSWORD)


def build_demo_users() -> List[User]:
    return [
        User(
            hashed_password=demo_password_hash(),
            assigned_clients=list(row.get("assigned_clients", [])),
            **{key: value for key, value in row.items() if key != "assigned_clients"},
        )
        for row in DEMO_USERS
    ]


def build_demo_parcels(with_version: bool = False) -> List[Parcel]:
    """Fresh Parcel objects; the database assigns versions itself on insert."""
    extra = {"version": 1} if with_version else {}
    return [Parcel(**row, **extra) for row in DEMO_PARCELS]
