"""
Parcel API Endpoints.

Every authenticated user works on the parcels visible to them: clients
their own, staff and admins all of them. Staff register and delete
parcels; status changes go through the parcel state machine.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.domain.visibility import ALL_STATUSES
from backend.app.models.enums import UserRole
from backend.app.models.parcel_enums import ParcelStatus
from backend.app.schemas.common import ActionResponse
from backend.app.schemas.parcel import (
    ParcelCreate, ParcelStatusUpdate, ParcelResponse, ParcelListResponse, ParcelActionsResponse
)
from backend.app.core.dependencies import get_actor, get_data_access
from backend.app.core.guards import require_role, require_staff
from backend.app.domain.context import Actor
from backend.app.services import parcel_service

router = APIRouter(prefix="/parcels", tags=["Parcels"])

STATUS_VALUES = {s.value for s in ParcelStatus}


@router.get("", response_model=ParcelListResponse)
async def list_parcels(
    search: Optional[str] = Query(None, description="Substring of the tracking number"),
    status_filter: Optional[str] = Query(None, alias="status", description="Exact status, or All"),
    actor: Actor = Depends(get_actor),
    data=Depends(get_data_access)
):
    """List the parcels visible to the current user, newest first."""
    if status_filter and status_filter != ALL_STATUSES and status_filter not in STATUS_VALUES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status filter '{status_filter}'"
        )
    parcels = await parcel_service.list_parcels(data, actor, search=search, status_filter=status_filter)
    return ParcelListResponse(
        parcels=[ParcelResponse.model_validate(p) for p in parcels],
        total=len(parcels)
    )


@router.get("/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    actor: Actor = Depends(get_actor),
    data=Depends(get_data_access)
):
    """Get one parcel. Parcels the user may not see are reported as not found."""
    parcel = await parcel_service.get_parcel(data, actor, parcel_id)
    return ParcelResponse.model_validate(parcel)


@router.get("/{parcel_id}/actions", response_model=ParcelActionsResponse)
async def get_parcel_actions(
    parcel_id: str = Path(..., description="Parcel ID"),
    actor: Actor = Depends(get_actor),
    data=Depends(get_data_access)
):
    """Actions the current user is offered for this parcel."""
    parcel, actions = await parcel_service.get_parcel_actions(data, actor, parcel_id)
    return ParcelActionsResponse(parcel_id=parcel.id, status=parcel.status, actions=list(actions))


@router.post("", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED)
async def create_parcel(
    parcel_data: ParcelCreate,
    actor: Actor = Depends(require_staff),
    data=Depends(get_data_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Register a parcel for a client (Staff only).

    Validates:
    - Client exists and has the CLIENT role
    - Tracking number is unique
    """
    parcel = await parcel_service.create_parcel(
        data,
        db,
        actor,
        tracking_number=parcel_data.tracking_number,
        client_id=parcel_data.client_id,
        sender=parcel_data.sender,
        description=parcel_data.description,
    )
    return ParcelResponse.model_validate(parcel)


@router.put("/{parcel_id}", response_model=ParcelResponse)
async def update_parcel_status(
    parcel_data: ParcelStatusUpdate,
    parcel_id: str = Path(..., description="Parcel ID"),
    actor: Actor = Depends(require_role([UserRole.STAFF, UserRole.CLIENT])),
    data=Depends(get_data_access),
    db: AsyncSession = Depends(get_db)
):
    """
    Change a parcel's status.

    Staff: Accept, Dispatch, Decline. Clients (own parcels): Confirm
    Receipt, Report Issue. Pass the last seen `version` to reject the
    update if someone else changed the parcel in the meantime.
    """
    parcel = await parcel_service.transition_parcel(
        data,
        db,
        actor,
        parcel_id,
        parcel_data.status,
        expected_version=parcel_data.version,
    )
    return ParcelResponse.model_validate(parcel)


@router.delete("/{parcel_id}", response_model=ActionResponse)
async def delete_parcel(
    parcel_id: str = Path(..., description="Parcel ID"),
    actor: Actor = Depends(require_staff),
    data=Depends(get_data_access),
    db: AsyncSession = Depends(get_db)
):
    """Delete a parcel (Staff only)."""
    await parcel_service.delete_parcel(data, db, actor, parcel_id)
    return ActionResponse(success=True, message="Parcel deleted", id=parcel_id)
