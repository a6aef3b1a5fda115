# Database Models
from safealarm.models.alert import Alert
from safealarm.models.base import Base, TimestampMixin
from safealarm.models.escalation_metric import EscalationMetric
from safealarm.models.sos_log import SosLog, SosStatus
from safealarm.models.trip import Trip, TripStatus

__all__ = [
    "Alert",
    "Base",
    "EscalationMetric",
    "SosLog",
    "SosStatus",
    "TimestampMixin",
    "Trip",
    "TripStatus",
]
