"""Pytest configuration and shared fixtures.

The store session is replaced by an ``AsyncMock`` and the SMS carrier by
an in-memory fake, so tests need neither PostgreSQL nor network access.
"""

import os
import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set testing mode BEFORE importing app to use NullPool
os.environ["TESTING"] = "true"

from safealarm.config import settings

settings.testing = True

from safealarm.core.security import create_access_token
from safealarm.database import get_db
from safealarm.main import app
from safealarm.services.sms_transport import SmsTransportError, get_sms_transport


class FakeTransport:
    """In-memory stand-in for ``SmsTransport``.

    Destinations listed in ``failures`` raise ``SmsTransportError`` with
    the mapped message; every other send returns a fresh SID.
    """

    is_configured = True
    max_retries = 0

    def __init__(self, failures: dict[str, str] | None = None):
        self.failures = failures or {}
        self.sent: list[tuple[str, str]] = []

    async def send(self, to: str, body: str) -> str:
        self.sent.append((to, body))
        if to in self.failures:
            raise SmsTransportError(self.failures[to])
        return f"SM{uuid.uuid4().hex}"


def make_session() -> AsyncMock:
    """Mock AsyncSession; ``add`` is sync, ``refresh`` fills server defaults."""
    session = AsyncMock()
    session.add = MagicMock()

    async def refresh(obj):
        if getattr(obj, "id", None) is None:
            obj.id = uuid.uuid4()
        if hasattr(obj, "created_at") and obj.created_at is None:
            obj.created_at = datetime.now(UTC)

    session.refresh = AsyncMock(side_effect=refresh)
    return session


def scalar_result(value) -> MagicMock:
    """Result object whose ``scalar_one_or_none()`` returns ``value``."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


def auth_headers(uid: str = "user-123") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(uid)}"}


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def db_session() -> AsyncMock:
    return make_session()


@pytest_asyncio.fixture
async def client(db_session, fake_transport) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app with the store and carrier overridden.

    Starlette re-raises unhandled errors after the 500 response is sent;
    the client keeps the response instead.
    """
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_sms_transport] = lambda: fake_transport
    try:
        async with AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        ) as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
