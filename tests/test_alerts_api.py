"""Tests for the acknowledgment link."""

import uuid
from datetime import UTC, datetime

import pytest

from safealarm.models.alert import Alert
from tests.conftest import scalar_result


class TestAcknowledgeLink:
    """Tests for GET /api/alerts/acknowledge."""

    @pytest.mark.asyncio
    async def test_missing_alert_id_is_400(self, client):
        response = await client.get("/api/alerts/acknowledge")

        assert response.status_code == 400
        assert response.text == "Missing alertId"

    @pytest.mark.asyncio
    async def test_malformed_alert_id_is_not_found(self, client, db_session):
        response = await client.get("/api/alerts/acknowledge", params={"alertId": "nope"})

        assert response.status_code == 404
        db_session.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_alert_is_not_found(self, client, db_session):
        db_session.execute.return_value = scalar_result(None)

        response = await client.get(
            "/api/alerts/acknowledge", params={"alertId": str(uuid.uuid4())}
        )

        assert response.status_code == 404
        assert response.text == "Alert not found"
        db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_acknowledges_and_renders_page(self, client, db_session):
        alert = Alert(
            id=uuid.uuid4(),
            contact_name="Ravi",
            acknowledged=False,
            created_at=datetime.now(UTC),
        )
        db_session.execute.return_value = scalar_result(alert)

        response = await client.get(
            "/api/alerts/acknowledge", params={"alertId": str(alert.id)}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Thank you, <strong>Ravi</strong>" in response.text
        assert alert.acknowledged is True

    @pytest.mark.asyncio
    async def test_store_failure_is_500(self, client, db_session):
        db_session.execute.side_effect = RuntimeError("store unavailable")

        response = await client.get(
            "/api/alerts/acknowledge", params={"alertId": str(uuid.uuid4())}
        )

        assert response.status_code == 500
        assert response.text == "Error processing acknowledgment"
