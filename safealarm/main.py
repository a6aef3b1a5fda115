"""SafeAlarm FastAPI Application."""

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from safealarm.config import settings, validate_secret_key
from safealarm.core.errors import register_exception_handlers
from safealarm.database import close_database
from safealarm.logging_config import get_logger, setup_logging
from safealarm.middleware import CorrelationIdMiddleware
from safealarm.routers import alerts, dashboard, health, notifications, sos, trips
from safealarm.services.sms_transport import close_sms_transport, get_sms_transport

setup_logging(
    log_format=settings.log_format,
    log_level=settings.log_level,
    service_name=settings.service_name,
)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Note: Migrations are run by scripts/start.sh before uvicorn starts
    validate_secret_key()

    # One carrier client for the whole process, shared by all requests
    transport = get_sms_transport()
    logger.info(
        "SafeAlarm API started",
        sms_configured=transport.is_configured,
        sms_max_retries=transport.max_retries,
    )

    yield

    logger.info("Shutting down SafeAlarm API...")
    await close_sms_transport()
    await close_database()
    logger.info("SafeAlarm API shutdown complete")


app = FastAPI(
    title="SafeAlarm API",
    description="Trip safety monitoring: escalation, SOS dispatch and acknowledgment",
    version="0.1.0",
    lifespan=lifespan,
)

# Middleware (order matters: first added = last executed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

app.include_router(health.router)
app.include_router(notifications.router)
app.include_router(sos.router)
app.include_router(alerts.router)
app.include_router(trips.router)
app.include_router(dashboard.router)


@app.get("/")
async def root() -> dict[str, Any]:
    """Root endpoint."""
    return {
        "name": "SafeAlarm API",
        "version": "0.1.0",
        "docs": "/docs",
    }
