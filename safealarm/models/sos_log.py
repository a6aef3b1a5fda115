"""SOS log model.

Append-only audit trail with one row per attempted outbound SMS,
successful or not.
"""

import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import DateTime, Enum, Index, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from safealarm.models.base import Base


class SosStatus(str, enum.Enum):
    """Outcome of a dispatch attempt."""

    SENT = "sent"
    FAILED = "failed"


class SosLog(Base):
    """Audit record of one dispatch attempt to one destination.

    ``message`` and ``message_sid`` are only set for successful sends,
    ``error`` only for failed ones. ``requester_uid`` is null for sends
    made through the unauthenticated notification endpoint.
    """

    __tablename__ = "sos_logs"

    __table_args__ = (Index("ix_sos_logs_requester_timestamp", "requester_uid", "timestamp"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    requester_uid: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )

    # Normalized destination actually sent to
    to_phone: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    message_sid: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )

    status: Mapped[SosStatus] = mapped_column(
        Enum(
            SosStatus,
            name="sosstatus",
            create_type=False,
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )

    error: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )

    def __repr__(self) -> str:
        return f"<SosLog(to={self.to_phone}, status={self.status.value})>"
