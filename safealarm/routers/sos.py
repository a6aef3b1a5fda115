"""Authenticated SOS send routes (single and batch)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from safealarm.core.auth import CallerIdentity, get_caller_identity
from safealarm.database import get_db
from safealarm.schemas.sos import (
    SosBatchEntry,
    SosBatchRequest,
    SosBatchResponse,
    SosSendRequest,
    SosSendResponse,
)
from safealarm.services.notification_dispatcher import send_batch, send_single
from safealarm.services.sms_transport import SmsTransport, get_sms_transport

router = APIRouter(prefix="/api/sos", tags=["sos"])


@router.post("/send", response_model=SosSendResponse)
async def send_sos(
    data: SosSendRequest,
    caller: CallerIdentity = Depends(get_caller_identity),
    db: AsyncSession = Depends(get_db),
    transport: SmsTransport = Depends(get_sms_transport),
) -> SosSendResponse:
    """Send an SOS message to one contact.

    Fails with ``internal`` when the carrier rejects the send; the attempt
    is audited either way.
    """
    sid = await send_single(
        db,
        transport,
        requester_uid=caller.uid,
        to_phone=data.to_phone,
        message=data.message,
        location=data.location,
    )
    return SosSendResponse(success=True, sid=sid)


@router.post("/batch", response_model=SosBatchResponse)
async def send_sos_batch(
    data: SosBatchRequest,
    caller: CallerIdentity = Depends(get_caller_identity),
    db: AsyncSession = Depends(get_db),
    transport: SmsTransport = Depends(get_sms_transport),
) -> SosBatchResponse:
    """Send an SOS message to every contact and report each outcome."""
    results = await send_batch(
        db,
        transport,
        requester_uid=caller.uid,
        contacts=data.contacts,
        message=data.message,
        location=data.location,
    )
    return SosBatchResponse(
        summary=[
            SosBatchEntry(phone=r.phone, success=r.success, error=r.error)
            for r in results
        ]
    )
