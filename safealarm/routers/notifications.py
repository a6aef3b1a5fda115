"""Unauthenticated SMS notification endpoint.

Sends a pre-formatted message to a dialable number. Error bodies use the
endpoint's own ``{"error": ...}`` shape rather than the taxonomy payload.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from safealarm.database import get_db
from safealarm.schemas.notification import SmsAlertRequest, SmsAlertResponse
from safealarm.services.notification_dispatcher import send_notification
from safealarm.services.sms_transport import SmsTransport, get_sms_transport

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.post("/sms", response_model=SmsAlertResponse)
async def send_sms_alert(
    data: SmsAlertRequest,
    db: AsyncSession = Depends(get_db),
    transport: SmsTransport = Depends(get_sms_transport),
):
    """Send one SMS. 400 if a field is missing, 500 if the carrier fails."""
    if not data.phone or not data.message:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Missing phone or message"},
        )

    outcome = await send_notification(db, transport, data.phone, data.message)
    if not outcome.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": outcome.error},
        )

    return SmsAlertResponse(success=True)
