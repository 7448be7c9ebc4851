"""
Dashboard API Endpoints.

Role-scoped parcel statistics and an optional AI-written summary.
"""

from fastapi import APIRouter, Depends
from backend.app.core.dependencies import get_actor, get_data_access
from backend.app.domain.context import Actor
from backend.app.schemas.dashboard import DashboardStats, DashboardAnalysis
from backend.app.services.analytics import AnalyticsService
from backend.app.services.text_generation import (
    TextGenerator, get_text_generator, generate_dashboard_analysis
)

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    actor: Actor = Depends(get_actor),
    data=Depends(get_data_access)
):
    """Parcel counts over the parcels visible to the current user."""
    return await AnalyticsService.get_dashboard_stats(data, actor)


@router.post("/analysis", response_model=DashboardAnalysis)
async def analyze_dashboard(
    actor: Actor = Depends(get_actor),
    data=Depends(get_data_access),
    generator: TextGenerator = Depends(get_text_generator)
):
    """
    Short executive summary of the current user's dashboard.

    Returns a fixed fallback sentence when the text-generation provider
    is not configured or fails.
    """
    stats = await AnalyticsService.get_dashboard_stats(data, actor)
    summary = await generate_dashboard_analysis(
        generator, AnalyticsService.stats_for_prompt(stats), actor.role.value
    )
    return DashboardAnalysis(stats=stats, summary=summary)
