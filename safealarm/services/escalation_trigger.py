"""Escalation trigger.

Watches trip updates for the edge into the escalated status and appends
one ``EscalationMetric`` per edge. It is an audit sink only: notifying
contacts is done by the client through the batch SOS route.
"""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from safealarm.logging_config import get_logger
from safealarm.models.escalation_metric import EscalationMetric
from safealarm.models.trip import Trip, TripStatus

logger = get_logger(__name__)


@dataclass(frozen=True)
class TripSnapshot:
    """Fields of a trip captured before an update is applied."""

    status: TripStatus
    eta: datetime | None
    snooze_count: int
    contact_count: int

    @classmethod
    def of(cls, trip: Trip) -> "TripSnapshot":
        return cls(
            status=trip.status,
            eta=trip.eta,
            snooze_count=trip.snooze_count or 0,
            contact_count=len(trip.contacts or []),
        )


def is_escalation_edge(before: TripStatus | None, after: TripStatus | None) -> bool:
    """True only when the status changes into escalated.

    Re-saving an already escalated trip is not an edge.
    """
    return before != TripStatus.ESCALATED and after == TripStatus.ESCALATED


def on_trip_updated(
    db: AsyncSession,
    trip_id: uuid.UUID,
    before: TripSnapshot,
    after: TripSnapshot,
) -> EscalationMetric | None:
    """Stage an escalation metric if this update is an escalation edge.

    The metric is added to the session so it commits atomically with the
    trip update itself.

    Returns:
        The staged metric, or None if the update was not an edge.
    """
    if not is_escalation_edge(before.status, after.status):
        return None

    metric = EscalationMetric(
        trip_id=trip_id,
        escalated_at=datetime.now(UTC),
        eta_time=after.eta,
        snooze_count=after.snooze_count,
        contact_count=after.contact_count,
    )
    db.add(metric)

    logger.info(
        "Trip escalated",
        trip_id=str(trip_id),
        snooze_count=after.snooze_count,
        contact_count=after.contact_count,
    )
    return metric
