"""Dashboard metrics aggregation over trips, alerts and escalations."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from safealarm.models.alert import Alert
from safealarm.models.escalation_metric import EscalationMetric
from safealarm.models.trip import Trip, TripStatus
from safealarm.schemas.metrics import DashboardMetrics


def compute_ack_rate(acknowledged: int, total: int) -> float:
    """Acknowledged share of alerts as a percentage, one decimal.

    0 when there are no alerts.
    """
    if total == 0:
        return 0.0
    return round(acknowledged / total * 100, 1)


def build_dashboard_metrics(
    trips_by_status: dict[TripStatus, int],
    total_alerts: int,
    acknowledged_alerts: int,
    escalation_events: int,
) -> DashboardMetrics:
    """Assemble the rollup from raw counts."""
    return DashboardMetrics(
        total_trips=sum(trips_by_status.values()),
        confirmed_trips=trips_by_status.get(TripStatus.CONFIRMED, 0),
        escalated_trips=trips_by_status.get(TripStatus.ESCALATED, 0),
        acknowledged_alerts=acknowledged_alerts,
        total_alerts=total_alerts,
        ack_rate=compute_ack_rate(acknowledged_alerts, total_alerts),
        escalation_events=escalation_events,
    )


async def get_dashboard_metrics(db: AsyncSession) -> DashboardMetrics:
    """Count every trip, alert and escalation metric currently stored."""
    status_rows = await db.execute(
        select(Trip.status, func.count(Trip.id)).group_by(Trip.status)
    )
    trips_by_status = {status: count for status, count in status_rows.all()}

    alert_row = await db.execute(
        select(
            func.count(Alert.id),
            func.count(Alert.id).filter(Alert.acknowledged.is_(True)),
        )
    )
    total_alerts, acknowledged_alerts = alert_row.one()

    escalation_events = await db.scalar(select(func.count(EscalationMetric.id)))

    return build_dashboard_metrics(
        trips_by_status,
        total_alerts=total_alerts or 0,
        acknowledged_alerts=acknowledged_alerts or 0,
        escalation_events=escalation_events or 0,
    )
