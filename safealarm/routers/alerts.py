"""Alert acknowledgment link.

Opened by contacts from the SMS; unauthenticated, the alert ID is the
token. Responses are HTML on success and plain text otherwise.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import HTMLResponse, PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from safealarm.database import get_db
from safealarm.logging_config import get_logger
from safealarm.services.acknowledgment import (
    acknowledge_alert,
    render_acknowledgment_page,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/alerts", tags=["alerts"])


@router.get("/acknowledge", response_class=HTMLResponse)
async def acknowledge(
    alert_id: str | None = Query(default=None, alias="alertId"),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Acknowledge an alert and render the confirmation page."""
    if not alert_id:
        return PlainTextResponse("Missing alertId", status_code=status.HTTP_400_BAD_REQUEST)

    try:
        parsed_id = uuid.UUID(alert_id)
    except ValueError:
        # Not a valid alert ID, so no alert can match it
        return PlainTextResponse("Alert not found", status_code=status.HTTP_404_NOT_FOUND)

    try:
        alert = await acknowledge_alert(db, parsed_id)
    except Exception:
        logger.exception("Failed to acknowledge alert", alert_id=alert_id)
        return PlainTextResponse(
            "Error processing acknowledgment",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if alert is None:
        return PlainTextResponse("Alert not found", status_code=status.HTTP_404_NOT_FOUND)

    return HTMLResponse(render_acknowledgment_page(alert.contact_name, alert.acknowledged_at))
