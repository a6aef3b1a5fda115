"""Trip lifecycle router.

The mobile client reports a trip's lifecycle here. Status updates feed
the escalation trigger.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from safealarm.core.auth import CallerIdentity, get_caller_identity
from safealarm.core.errors import ApiError, ErrorCode
from safealarm.database import get_db
from safealarm.schemas.alert import AlertCreate, AlertResponse
from safealarm.schemas.trip import TripCreate, TripResponse, TripUpdate
from safealarm.services.acknowledgment import (
    AlertCreationError,
    build_acknowledgment_url,
    create_alert,
)
from safealarm.services.trip_service import (
    TripTransitionError,
    create_trip,
    get_trip,
    update_trip,
)

router = APIRouter(prefix="/api/trips", tags=["trips"])


def _trip_not_found() -> ApiError:
    return ApiError(ErrorCode.NOT_FOUND, "Trip not found")


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
async def start_trip(
    data: TripCreate,
    caller: CallerIdentity = Depends(get_caller_identity),
    db: AsyncSession = Depends(get_db),
) -> TripResponse:
    """Start a new pending trip."""
    trip = await create_trip(caller.uid, data, db)
    return TripResponse.model_validate(trip)


@router.get("/{trip_id}", response_model=TripResponse)
async def read_trip(
    trip_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller_identity),
    db: AsyncSession = Depends(get_db),
) -> TripResponse:
    """Get one of the caller's trips."""
    trip = await get_trip(caller.uid, trip_id, db)
    if trip is None:
        raise _trip_not_found()
    return TripResponse.model_validate(trip)


@router.patch("/{trip_id}", response_model=TripResponse)
async def patch_trip(
    trip_id: uuid.UUID,
    data: TripUpdate,
    caller: CallerIdentity = Depends(get_caller_identity),
    db: AsyncSession = Depends(get_db),
) -> TripResponse:
    """Update a trip's status, ETA or snooze count.

    Returns 409 if the trip is already in a different terminal status.
    """
    try:
        trip = await update_trip(caller.uid, trip_id, data, db)
    except TripTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    if trip is None:
        raise _trip_not_found()
    return TripResponse.model_validate(trip)


@router.post(
    "/{trip_id}/alerts",
    response_model=AlertResponse,
    status_code=status.HTTP_201_CREATED,
)
async def issue_alert(
    trip_id: uuid.UUID,
    data: AlertCreate,
    caller: CallerIdentity = Depends(get_caller_identity),
    db: AsyncSession = Depends(get_db),
) -> AlertResponse:
    """Record an alert for one contact and return its acknowledgment link."""
    try:
        alert = await create_alert(caller.uid, trip_id, data, db)
    except AlertCreationError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    if alert is None:
        raise _trip_not_found()

    return AlertResponse(
        id=alert.id,
        trip_id=alert.trip_id,
        contact_name=alert.contact_name,
        acknowledged=alert.acknowledged,
        acknowledged_at=alert.acknowledged_at,
        created_at=alert.created_at,
        ack_url=build_acknowledgment_url(alert.id),
    )
