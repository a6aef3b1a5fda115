"""Trip lifecycle service.

Creates and updates trips on behalf of their owner. Every update is
handed to the escalation trigger with the status it had before, in the
same commit.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from safealarm.logging_config import get_logger
from safealarm.models.trip import Trip, TripStatus
from safealarm.schemas.trip import TripCreate, TripUpdate
from safealarm.services.escalation_trigger import TripSnapshot, on_trip_updated

logger = get_logger(__name__)


class TripTransitionError(ValueError):
    """Attempted to move a trip out of a terminal status."""


def check_transition(current: TripStatus, requested: TripStatus) -> None:
    """Enforce monotonic status changes.

    pending may move to any status. A terminal status may only be
    re-saved as itself.

    Raises:
        TripTransitionError: For any other change.
    """
    if current.is_terminal and requested != current:
        raise TripTransitionError(
            f"Trip is already {current.value}; cannot change to {requested.value}"
        )


async def create_trip(owner_uid: str, data: TripCreate, db: AsyncSession) -> Trip:
    """Create a pending trip owned by ``owner_uid``."""
    trip = Trip(
        owner_uid=owner_uid,
        status=TripStatus.PENDING,
        start_time=data.start_time or datetime.now(UTC),
        eta=data.eta,
        snooze_count=0,
        contacts=list(data.contacts),
    )
    db.add(trip)
    await db.commit()
    await db.refresh(trip)

    logger.info(
        "Trip created",
        trip_id=str(trip.id),
        owner_uid=owner_uid,
        contact_count=len(trip.contacts),
    )
    return trip


async def get_trip(owner_uid: str, trip_id: uuid.UUID, db: AsyncSession) -> Trip | None:
    """Get a trip by ID, only if ``owner_uid`` owns it."""
    result = await db.execute(
        select(Trip).where(Trip.id == trip_id, Trip.owner_uid == owner_uid)
    )
    return result.scalar_one_or_none()


async def update_trip(
    owner_uid: str,
    trip_id: uuid.UUID,
    data: TripUpdate,
    db: AsyncSession,
) -> Trip | None:
    """Apply a partial update and run the escalation trigger.

    Returns:
        The updated trip, or None if not found for this owner.

    Raises:
        TripTransitionError: If the status change is not allowed.
    """
    trip = await get_trip(owner_uid, trip_id, db)
    if trip is None:
        return None

    before = TripSnapshot.of(trip)

    if data.status is not None:
        check_transition(trip.status, data.status)
        trip.status = data.status
    if data.eta is not None:
        trip.eta = data.eta
    if data.snooze_count is not None:
        trip.snooze_count = data.snooze_count

    on_trip_updated(db, trip.id, before, TripSnapshot.of(trip))

    await db.commit()
    await db.refresh(trip)

    logger.info(
        "Trip updated",
        trip_id=str(trip.id),
        status=trip.status.value,
        previous_status=before.status.value,
    )
    return trip
