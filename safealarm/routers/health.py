"""Health check endpoints for container orchestration."""

from typing import Any

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse

from safealarm.database import check_database_connection
from safealarm.services.sms_transport import get_sms_transport

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=None)
async def health_check() -> Response:
    """Store connectivity and carrier configuration.

    200 with ``"status": "healthy"`` when the store answers, 503 with
    ``"degraded"`` otherwise. An unconfigured carrier is reported but does
    not fail the check.
    """
    db_connected = await check_database_connection()
    content = {
        "status": "healthy" if db_connected else "degraded",
        "database": "connected" if db_connected else "disconnected",
        "sms": "configured" if get_sms_transport().is_configured else "unconfigured",
    }
    return JSONResponse(
        status_code=status.HTTP_200_OK
        if db_connected
        else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=content,
    )


@router.get("/health/live")
async def liveness_probe() -> dict[str, Any]:
    """Liveness probe; never touches external dependencies."""
    return {"status": "alive"}


@router.get("/health/ready", response_model=None)
async def readiness_probe() -> Response:
    """Readiness probe; ready only when the store is reachable."""
    if await check_database_connection():
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "ready", "database": "connected"},
        )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "database": "disconnected"},
    )
