"""Trip model.

A trip is a monitored, time-boxed journey reported by the mobile client.
Its status only ever moves forward: once it reaches a terminal status
(confirmed, cancelled or escalated) it never changes again.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from safealarm.models.base import Base, TimestampMixin


class TripStatus(str, enum.Enum):
    """Lifecycle status of a trip."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    ESCALATED = "escalated"

    @property
    def is_terminal(self) -> bool:
        return self is not TripStatus.PENDING


class Trip(Base, TimestampMixin):
    """A monitored journey with an ETA and an ordered list of contacts."""

    __tablename__ = "trips"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Caller uid issued by the external auth provider
    owner_uid: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
        index=True,
    )

    status: Mapped[TripStatus] = mapped_column(
        Enum(
            TripStatus,
            name="tripstatus",
            create_type=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=TripStatus.PENDING,
    )

    start_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    eta: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    snooze_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # Ordered contact phone numbers as entered by the user
    contacts: Mapped[list[str]] = mapped_column(
        JSONB,
        nullable=False,
        default=list,
    )

    def __repr__(self) -> str:
        return f"<Trip(id={self.id}, status={self.status.value})>"
