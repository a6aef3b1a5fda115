"""SMS notification dispatch with audit trail.

``dispatch`` performs exactly one carrier send and reports the outcome
without raising; callers stage the matching ``SosLog`` row and commit it.

Two paths use it:
  - Single send: one destination, first failure surfaced to the caller
  - Batch send: N destinations sent concurrently, one outcome per contact
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from safealarm.core.errors import ApiError, ErrorCode
from safealarm.logging_config import get_logger
from safealarm.models.sos_log import SosLog, SosStatus
from safealarm.schemas.sos import GeoLocation
from safealarm.services.phone import normalize_phone
from safealarm.services.sms_transport import SmsTransport, SmsTransportError

logger = get_logger(__name__)

MAP_LINK_TEMPLATE = "\n\n\U0001f4cd Location: https://maps.google.com/?q={lat},{lng}"


@dataclass
class DispatchOutcome:
    """Result of one send attempt."""

    destination: str
    success: bool
    message_id: str | None = None
    error: str | None = None


@dataclass
class BatchResult:
    """Per-contact entry of a batch summary, keyed by the phone as entered."""

    phone: str
    success: bool
    error: str | None = None


def _format_coordinate(value: float) -> str:
    # Whole degrees render without a trailing ".0"
    return str(int(value)) if float(value).is_integer() else str(value)


def with_location(message: str, location: GeoLocation | None) -> str:
    """Append a map link when both coordinates are present."""
    if location is None or location.latitude is None or location.longitude is None:
        return message
    return message + MAP_LINK_TEMPLATE.format(
        lat=_format_coordinate(location.latitude),
        lng=_format_coordinate(location.longitude),
    )


async def dispatch(transport: SmsTransport, destination: str, body: str) -> DispatchOutcome:
    """Send one message and return its outcome. Never raises."""
    try:
        sid = await transport.send(destination, body)
    except SmsTransportError as e:
        logger.warning("SMS dispatch failed", destination=destination, error=str(e))
        return DispatchOutcome(destination=destination, success=False, error=str(e))
    except Exception as e:
        logger.exception("Unexpected error during SMS dispatch", destination=destination)
        return DispatchOutcome(destination=destination, success=False, error=str(e))

    logger.info("SMS dispatched", destination=destination, message_sid=sid)
    return DispatchOutcome(destination=destination, success=True, message_id=sid)


def record_attempt(
    db: AsyncSession,
    requester_uid: str | None,
    outcome: DispatchOutcome,
    body: str,
) -> SosLog:
    """Stage the audit row for a dispatch attempt on the session.

    The caller commits.
    """
    if outcome.success:
        entry = SosLog(
            requester_uid=requester_uid,
            to_phone=outcome.destination,
            message=body,
            message_sid=outcome.message_id,
            status=SosStatus.SENT,
        )
    else:
        entry = SosLog(
            requester_uid=requester_uid,
            to_phone=outcome.destination,
            status=SosStatus.FAILED,
            error=outcome.error,
        )
    db.add(entry)
    return entry


async def commit_attempts(db: AsyncSession, attempt_count: int) -> None:
    """Commit the staged audit rows.

    Raises:
        ApiError(internal): The store rejected the write. The session is
            rolled back.
    """
    try:
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Failed to record SOS attempts", attempt_count=attempt_count)
        raise ApiError(ErrorCode.INTERNAL, "Failed to record SOS attempt") from e


async def send_notification(
    db: AsyncSession,
    transport: SmsTransport,
    phone: str,
    message: str,
) -> DispatchOutcome:
    """Send a pre-formatted message to a dialable number, unauthenticated.

    The destination is used as given. The attempt is audited with no
    requester.
    """
    outcome = await dispatch(transport, phone, message)
    record_attempt(db, None, outcome, message)
    await commit_attempts(db, 1)
    return outcome


async def send_single(
    db: AsyncSession,
    transport: SmsTransport,
    requester_uid: str,
    to_phone: str,
    message: str,
    location: GeoLocation | None = None,
) -> str:
    """Send an SOS message to one contact and return the message SID.

    Raises:
        ApiError(internal): The carrier send failed. The failed attempt is
            committed to the audit log before this is raised. Also raised
            if the audit write itself fails.
    """
    destination = normalize_phone(to_phone)
    body = with_location(message, location)

    outcome = await dispatch(transport, destination, body)
    record_attempt(db, requester_uid, outcome, body)
    await commit_attempts(db, 1)

    if not outcome.success:
        raise ApiError(ErrorCode.INTERNAL, outcome.error or "SMS send failed")
    return outcome.message_id


async def send_batch(
    db: AsyncSession,
    transport: SmsTransport,
    requester_uid: str,
    contacts: Sequence[str] | None,
    message: str,
    location: GeoLocation | None = None,
) -> list[BatchResult]:
    """Send one SOS message to every contact concurrently.

    Waits for every send to settle; a failing contact never cancels or
    changes the outcome of another. The summary has one entry per input
    contact, in input order, carrying the phone string as entered.

    Raises:
        ApiError(invalid-argument): ``contacts`` is missing, not a list, or
            empty. No send is attempted.
        ApiError(internal): The audit rows could not be written.
    """
    if not contacts or not isinstance(contacts, (list, tuple)):
        raise ApiError(
            ErrorCode.INVALID_ARGUMENT, "contacts must be a non-empty array."
        )

    body = with_location(message, location)

    async def attempt(phone: str) -> DispatchOutcome:
        outcome = await dispatch(transport, normalize_phone(phone), body)
        record_attempt(db, requester_uid, outcome, body)
        return outcome

    outcomes = await asyncio.gather(*(attempt(phone) for phone in contacts))

    # Audit rows for the whole batch land in one commit
    await commit_attempts(db, len(outcomes))

    sent = sum(1 for o in outcomes if o.success)
    logger.info(
        "SOS batch dispatched",
        requester_uid=requester_uid,
        contacts_count=len(contacts),
        sent_count=sent,
        failed_count=len(contacts) - sent,
    )

    return [
        BatchResult(phone=phone, success=o.success, error=o.error)
        for phone, o in zip(contacts, outcomes)
    ]
