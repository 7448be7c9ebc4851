"""
Dashboard Schemas.
"""

from typing import Optional
from backend.app.models.enums import UserRole
from backend.app.schemas.common import CamelModel


class DashboardStats(CamelModel):
    """Parcel counts over the parcels visible to the current user."""
    role: UserRole
    total_parcels: int
    pending: int
    accepted: int
    in_transit: int
    delivered: int
    declined: int
    # Admin only
    active_staff: Optional[int] = None
    total_users: Optional[int] = None


class DashboardAnalysis(CamelModel):
    stats: DashboardStats
    summary: str
