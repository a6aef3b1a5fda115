"""Schemas for the unauthenticated SMS notification endpoint."""

from pydantic import BaseModel


class SmsAlertRequest(BaseModel):
    """Request body; both fields are checked by the route so a missing one
    produces the endpoint's own 400 body."""

    phone: str | None = None
    message: str | None = None


class SmsAlertResponse(BaseModel):
    success: bool = True
