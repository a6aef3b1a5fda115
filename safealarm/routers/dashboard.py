"""Dashboard metrics endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from safealarm.core.errors import ApiError, ErrorCode
from safealarm.database import get_db
from safealarm.logging_config import get_logger
from safealarm.schemas.metrics import DashboardMetrics
from safealarm.services.metrics import get_dashboard_metrics

logger = get_logger(__name__)

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("/metrics", response_model=DashboardMetrics)
async def dashboard_metrics(db: AsyncSession = Depends(get_db)) -> DashboardMetrics:
    """Trip, alert and acknowledgment counts for the monitoring dashboard."""
    try:
        return await get_dashboard_metrics(db)
    except SQLAlchemyError as exc:
        logger.exception("Dashboard metrics query failed")
        raise ApiError(ErrorCode.INTERNAL, "Failed to compute dashboard metrics") from exc
