"""Alert schemas."""

import uuid
from datetime import datetime

from pydantic import Field, field_validator

from safealarm.schemas.base import CamelModel


class AlertCreate(CamelModel):
    """Request schema for recording an escalation alert to one contact."""

    contact_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("contact_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            msg = "Contact name cannot be empty or whitespace only"
            raise ValueError(msg)
        return v


class AlertResponse(CamelModel):
    """An alert plus the link the contact opens to acknowledge it."""

    id: uuid.UUID
    trip_id: uuid.UUID | None
    contact_name: str
    acknowledged: bool
    acknowledged_at: datetime | None
    created_at: datetime
    ack_url: str
