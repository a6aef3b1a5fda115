"""Alert acknowledgment.

Contacts receive an SMS with a link carrying the alert ID. Opening it
marks the alert acknowledged and shows a confirmation page. This module
is the only writer of ``Alert.acknowledged``.
"""

import html
import uuid
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from safealarm.config import settings
from safealarm.logging_config import get_logger
from safealarm.models.alert import Alert
from safealarm.models.trip import Trip, TripStatus
from safealarm.schemas.alert import AlertCreate

logger = get_logger(__name__)

DEFAULT_CONTACT_NAME = "Contact"

ACKNOWLEDGMENT_PAGE = """<!DOCTYPE html>
<html>
<head>
  <title>SafeAlarm - Alert Acknowledged</title>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <style>
    * {{ margin: 0; padding: 0; box-sizing: border-box; }}
    body {{
      font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif;
      background: #0A0A1A;
      color: white;
      min-height: 100vh;
      display: flex;
      align-items: center;
      justify-content: center;
      padding: 24px;
    }}
    .card {{
      background: rgba(255,255,255,0.05);
      border-radius: 24px;
      padding: 40px 32px;
      text-align: center;
      max-width: 400px;
      width: 100%;
      border: 1px solid rgba(255,255,255,0.08);
    }}
    .icon {{
      width: 80px;
      height: 80px;
      background: rgba(48, 209, 88, 0.15);
      border-radius: 50%;
      display: flex;
      align-items: center;
      justify-content: center;
      margin: 0 auto 24px;
      font-size: 36px;
    }}
    h1 {{ font-size: 26px; margin-bottom: 12px; }}
    p {{ color: rgba(255,255,255,0.6); font-size: 16px; line-height: 1.5; }}
    .badge {{
      display: inline-block;
      background: rgba(48, 209, 88, 0.15);
      color: #30D158;
      padding: 6px 16px;
      border-radius: 20px;
      font-size: 13px;
      font-weight: 600;
      margin-top: 20px;
    }}
  </style>
</head>
<body>
  <div class="card">
    <div class="icon">✅</div>
    <h1>Alert Acknowledged</h1>
    <p>Thank you, <strong>{contact_name}</strong>. Please check on the person immediately and call emergency services if you cannot reach them.</p>
    <div class="badge">Response logged at {logged_at} UTC</div>
  </div>
</body>
</html>
"""


class AlertCreationError(ValueError):
    """Alert requested for a trip that has not escalated."""


def build_acknowledgment_url(alert_id: uuid.UUID) -> str:
    """Link embedded in the SMS sent to the contact."""
    return f"{settings.public_base_url.rstrip('/')}/api/alerts/acknowledge?alertId={alert_id}"


def render_acknowledgment_page(contact_name: str | None, acknowledged_at: datetime) -> str:
    """Render the confirmation page shown to the contact."""
    return ACKNOWLEDGMENT_PAGE.format(
        contact_name=html.escape(contact_name or DEFAULT_CONTACT_NAME),
        logged_at=acknowledged_at.strftime("%H:%M:%S"),
    )


async def acknowledge_alert(db: AsyncSession, alert_id: uuid.UUID) -> Alert | None:
    """Mark an alert acknowledged and stamp the time.

    Repeat calls succeed and re-stamp ``acknowledged_at``; the flag itself
    stays true.

    Returns:
        The acknowledged alert, or None if no alert has this ID (nothing
        is written in that case).
    """
    result = await db.execute(select(Alert).where(Alert.id == alert_id))
    alert = result.scalar_one_or_none()
    if alert is None:
        return None

    was_acknowledged = alert.acknowledged
    alert.acknowledged = True
    alert.acknowledged_at = datetime.now(UTC)
    await db.commit()

    logger.info(
        "Alert acknowledged",
        alert_id=str(alert_id),
        repeat=was_acknowledged,
    )
    return alert


async def create_alert(
    owner_uid: str,
    trip_id: uuid.UUID,
    data: AlertCreate,
    db: AsyncSession,
) -> Alert | None:
    """Record an alert for one contact of an escalated trip.

    Returns:
        The new alert, or None if the trip is not found for this owner.

    Raises:
        AlertCreationError: If the trip has not escalated.
    """
    result = await db.execute(
        select(Trip).where(Trip.id == trip_id, Trip.owner_uid == owner_uid)
    )
    trip = result.scalar_one_or_none()
    if trip is None:
        return None

    if trip.status != TripStatus.ESCALATED:
        raise AlertCreationError(
            f"Alerts can only be issued for escalated trips (trip is {trip.status.value})"
        )

    alert = Alert(
        trip_id=trip.id,
        contact_name=data.contact_name,
        acknowledged=False,
        created_at=datetime.now(UTC),
    )
    db.add(alert)
    await db.commit()
    await db.refresh(alert)

    logger.info("Alert created", alert_id=str(alert.id), trip_id=str(trip.id))
    return alert
