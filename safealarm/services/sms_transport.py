"""SMS carrier transport.

Sends text messages through a Twilio-compatible REST API. One transport
(and its HTTP connection pool) is built at startup and shared by every
request handler; it holds no per-request state.
"""

from typing import Optional

import httpx

from safealarm.config import settings
from safealarm.logging_config import get_logger

logger = get_logger(__name__)


class SmsTransportError(Exception):
    """The carrier did not accept a message."""


class SmsTransport:
    """Client for the carrier's message-create endpoint.

    Args:
        account_sid: Carrier account identifier.
        auth_token: Carrier API secret.
        from_number: Sender number registered with the carrier.
        base_url: API root, e.g. ``https://api.twilio.com/2010-04-01``.
        timeout_seconds: HTTP timeout applied by the client.
        max_retries: Extra attempts after a failed send (0 = none).
        client: Optional pre-built ``httpx.AsyncClient`` (tests inject one
            backed by ``httpx.MockTransport``).
    """

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        base_url: str,
        timeout_seconds: float = 10.0,
        max_retries: int = 0,
        client: httpx.AsyncClient | None = None,
    ):
        self.account_sid = account_sid
        self.from_number = from_number
        self.max_retries = max(0, max_retries)
        self._messages_url = f"{base_url.rstrip('/')}/Accounts/{account_sid}/Messages.json"
        self._client = client or httpx.AsyncClient(
            timeout=timeout_seconds,
            auth=(account_sid, auth_token),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.from_number)

    async def send(self, to: str, body: str) -> str:
        """Send ``body`` to ``to`` and return the carrier message SID.

        Makes ``1 + max_retries`` attempts at most.

        Raises:
            SmsTransportError: If the transport is unconfigured or every
                attempt failed. The message is the last failure's text.
        """
        if not self.is_configured:
            raise SmsTransportError("SMS transport is not configured")

        for attempt in range(self.max_retries):
            try:
                return await self._create_message(to, body)
            except SmsTransportError as e:
                logger.warning(
                    "SMS send failed, retrying",
                    destination=to,
                    attempt=attempt + 1,
                    error=str(e),
                )
        return await self._create_message(to, body)

    async def _create_message(self, to: str, body: str) -> str:
        try:
            response = await self._client.post(
                self._messages_url,
                data={"From": self.from_number, "To": to, "Body": body},
            )
        except httpx.HTTPError as e:
            raise SmsTransportError(f"SMS carrier unreachable: {e}") from e

        if response.status_code not in (200, 201):
            raise SmsTransportError(_carrier_error_message(response))

        sid = response.json().get("sid")
        if not sid:
            raise SmsTransportError("SMS carrier response did not include a message SID")
        return sid

    async def aclose(self) -> None:
        await self._client.aclose()


def _carrier_error_message(response: httpx.Response) -> str:
    """Prefer the carrier's own error text over the bare status code."""
    try:
        detail = response.json().get("message")
    except ValueError:
        detail = None
    return detail or f"SMS carrier error: {response.status_code} {response.text}"


# Shared transport - created once at startup
_transport: Optional[SmsTransport] = None


def get_sms_transport() -> SmsTransport:
    """Get or create the process-wide transport.

    Also used as a FastAPI dependency.
    """
    global _transport
    if _transport is None:
        _transport = SmsTransport(
            account_sid=settings.sms_account_sid,
            auth_token=settings.sms_auth_token,
            from_number=settings.sms_from_number,
            base_url=settings.sms_provider_url,
            timeout_seconds=settings.sms_timeout_seconds,
            max_retries=settings.sms_max_retries,
        )
    return _transport


async def close_sms_transport() -> None:
    """Close the shared transport's connection pool."""
    global _transport
    if _transport is not None:
        await _transport.aclose()
        _transport = None
