"""SOS send schemas (single and batch callable routes)."""

from pydantic import Field

from safealarm.schemas.base import CamelModel


class GeoLocation(CamelModel):
    """Caller position attached to an SOS message."""

    latitude: float | None = None
    longitude: float | None = None


class SosSendRequest(CamelModel):
    """Request body for a single-recipient SOS send."""

    to_phone: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    location: GeoLocation | None = None


class SosSendResponse(CamelModel):
    """Response after a successful single send."""

    success: bool = True
    sid: str


class SosBatchRequest(CamelModel):
    """Request body for a batch SOS send.

    ``contacts`` is optional here so an absent list is reported as
    invalid-argument by the dispatcher rather than as a schema error.
    """

    contacts: list[str] | None = None
    message: str = Field(..., min_length=1)
    location: GeoLocation | None = None


class SosBatchEntry(CamelModel):
    """Outcome for one contact, keyed by the phone as entered."""

    phone: str
    success: bool
    error: str | None = None


class SosBatchResponse(CamelModel):
    """Per-contact outcomes in input order."""

    summary: list[SosBatchEntry]
