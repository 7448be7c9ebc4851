"""
Parcel Pydantic schemas.

Defines request and response models for parcel management.
"""

from pydantic import Field
from datetime import date
from typing import Optional, List
from backend.app.models.parcel_enums import ParcelAction, ParcelStatus
from backend.app.schemas.common import CamelModel


class ParcelCreate(CamelModel):
    """Schema for registering a new parcel. Status is always Pending."""
    tracking_number: str = Field(..., min_length=1, max_length=50, description="Tracking number, e.g. EP-1234")
    client_id: str = Field(..., min_length=1, description="Recipient client id")
    sender: str = Field("", max_length=255)
    description: str = Field("", max_length=500)


class ParcelStatusUpdate(CamelModel):
    """Schema for a status transition (PUT /parcels/{id})."""
    status: ParcelStatus
    version: Optional[int] = Field(None, ge=1, description="Last version seen; rejects the update if stale")


class ParcelResponse(CamelModel):
    """Schema for parcel response."""
    id: str
    tracking_number: str
    sender: str
    client_id: str
    description: str
    status: ParcelStatus
    date_created: date
    date_updated: date
    handled_by: Optional[str] = None
    version: int


class ParcelListResponse(CamelModel):
    """Schema for a filtered parcel list."""
    parcels: List[ParcelResponse]
    total: int


class ParcelActionsResponse(CamelModel):
    """Actions offered to the current user for one parcel."""
    parcel_id: str
    status: ParcelStatus
    actions: List[ParcelAction]
