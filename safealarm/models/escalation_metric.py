"""Escalation metric model.

Append-only audit record written once per trip escalation edge,
snapshotting the trip at the moment it became escalated.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from safealarm.models.base import Base


class EscalationMetric(Base):
    """Snapshot of a trip taken when it entered the escalated status."""

    __tablename__ = "escalation_metrics"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # No foreign key: metrics must survive trip deletion
    trip_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        nullable=False,
        index=True,
    )

    escalated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    eta_time: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    snooze_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    contact_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    def __repr__(self) -> str:
        return (
            f"<EscalationMetric(trip={self.trip_id}, "
            f"contacts={self.contact_count}, snoozes={self.snooze_count})>"
        )
