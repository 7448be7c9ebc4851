"""
Analytics Service.

Dashboard aggregates over the parcels visible to the current user.
Read-only.
"""

from collections import Counter
from typing import Any, Dict

from backend.app.domain.context import Actor
from backend.app.domain.visibility import visible_parcels
from backend.app.models.enums import UserRole
from backend.app.models.parcel_enums import ParcelStatus
from backend.app.schemas.dashboard import DashboardStats


class AnalyticsService:

    @staticmethod
    async def get_dashboard_stats(data, actor: Actor) -> DashboardStats:
        """Per-status parcel counts for the actor; admins also get user counts."""
        parcels = visible_parcels(actor, await data.parcels.get_all())
        counts = Counter(p.status for p in parcels)

        stats = DashboardStats(
            role=actor.role,
            total_parcels=len(parcels),
            pending=counts[ParcelStatus.PENDING],
            accepted=counts[ParcelStatus.ACCEPTED],
            in_transit=counts[ParcelStatus.IN_TRANSIT],
            delivered=counts[ParcelStatus.DELIVERED],
            declined=counts[ParcelStatus.DECLINED],
        )

        if actor.is_admin:
            users = await data.users.get_all()
            stats.total_users = len(users)
            stats.active_staff = sum(1 for u in users if u.role == UserRole.STAFF and u.is_active)

        return stats

    @staticmethod
    def stats_for_prompt(stats: DashboardStats) -> Dict[str, Any]:
        """Stats as plain JSON for the text-generation prompt."""
        return stats.model_dump(by_alias=True, exclude_none=True, mode="json")
