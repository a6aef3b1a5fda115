"""Trip lifecycle schemas."""

import uuid
from datetime import datetime

from pydantic import Field

from safealarm.models.trip import TripStatus
from safealarm.schemas.base import CamelModel


class TripCreate(CamelModel):
    """Request schema for starting a trip."""

    eta: datetime
    start_time: datetime | None = None
    contacts: list[str] = Field(default_factory=list, max_length=20)


class TripUpdate(CamelModel):
    """Request schema for a trip update. All fields optional."""

    status: TripStatus | None = None
    eta: datetime | None = None
    snooze_count: int | None = Field(default=None, ge=0)


class TripResponse(CamelModel):
    """A trip as returned to its owner."""

    id: uuid.UUID
    status: TripStatus
    start_time: datetime
    eta: datetime
    snooze_count: int
    contacts: list[str]
    owner_uid: str
