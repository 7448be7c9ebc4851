"""
User roles enumeration.

Defines the role types for the eParcel system.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles are mutually exclusive and fixed at account creation.

    Roles:
        ADMIN: Full access, manages staff and client accounts
        STAFF: Registers parcels and moves them through their lifecycle
        CLIENT: Sees and acts on their own parcels only
    """
    ADMIN = "ADMIN"
    STAFF = "STAFF"
    CLIENT = "CLIENT"
