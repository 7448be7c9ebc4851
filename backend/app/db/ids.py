"""
Identifier generation for persisted records.

Ids are short prefixed strings ("u…" for users, "p…" for parcels) so the
same format works for the database and the in-memory backend.
"""

import uuid


def generate_id(prefix: str) -> str:
    return f"{prefix}{uuid.uuid4().hex[:12]}"


def new_user_id() -> str:
    return generate_id("u")


def new_parcel_id() -> str:
    return generate_id("p")
