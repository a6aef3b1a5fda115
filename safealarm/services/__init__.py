# Business Logic Services
from safealarm.services.escalation_trigger import on_trip_updated
from safealarm.services.notification_dispatcher import (
    send_batch,
    send_notification,
    send_single,
)
from safealarm.services.sms_transport import (
    SmsTransport,
    SmsTransportError,
    close_sms_transport,
    get_sms_transport,
)

__all__ = [
    "on_trip_updated",
    "send_batch",
    "send_notification",
    "send_single",
    "SmsTransport",
    "SmsTransportError",
    "close_sms_transport",
    "get_sms_transport",
]
