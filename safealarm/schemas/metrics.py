"""Dashboard metrics schema."""

from safealarm.schemas.base import CamelModel


class DashboardMetrics(CamelModel):
    """Read-only rollup over trips, alerts and escalation metrics."""

    total_trips: int
    confirmed_trips: int
    escalated_trips: int
    acknowledged_alerts: int
    total_alerts: int
    # Percentage rounded to one decimal; 0 when there are no alerts
    ack_rate: float
    escalation_events: int
