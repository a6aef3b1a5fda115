"""Tests for single and batch SOS dispatch."""

import asyncio

import pytest
from sqlalchemy import Text
from sqlalchemy.exc import OperationalError

from safealarm.core.errors import ApiError, ErrorCode
from safealarm.models.sos_log import SosLog, SosStatus
from safealarm.schemas.sos import GeoLocation
from safealarm.services.notification_dispatcher import (
    DispatchOutcome,
    dispatch,
    record_attempt,
    send_batch,
    send_notification,
    send_single,
    with_location,
)
from tests.conftest import FakeTransport, make_session


def staged_logs(db) -> list[SosLog]:
    return [call.args[0] for call in db.add.call_args_list if isinstance(call.args[0], SosLog)]


# ---------------------------------------------------------------------------
# Location suffix (pure function)
# ---------------------------------------------------------------------------
class TestWithLocation:
    """Tests for with_location()."""

    def test_no_location_leaves_message(self):
        assert with_location("Help", None) == "Help"

    def test_appends_map_link(self):
        body = with_location("Help", GeoLocation(latitude=12.97, longitude=77.59))
        assert body.startswith("Help\n\n")
        assert body.endswith("Location: https://maps.google.com/?q=12.97,77.59")

    def test_missing_longitude_skips_link(self):
        assert with_location("Help", GeoLocation(latitude=12.97)) == "Help"

    def test_zero_coordinates_are_valid(self):
        body = with_location("Help", GeoLocation(latitude=0.0, longitude=0.0))
        assert body.endswith("?q=0,0")

    def test_whole_degrees_have_no_decimal_suffix(self):
        body = with_location("Help", GeoLocation(latitude=13.0, longitude=77))
        assert body.endswith("?q=13,77")


# ---------------------------------------------------------------------------
# Single dispatch and audit rows
# ---------------------------------------------------------------------------
class TestDispatch:
    """Tests for dispatch() and record_attempt()."""

    @pytest.mark.asyncio
    async def test_success_outcome(self):
        transport = FakeTransport()
        outcome = await dispatch(transport, "+919876543210", "Help")

        assert outcome.success is True
        assert outcome.message_id.startswith("SM")
        assert outcome.error is None
        assert transport.sent == [("+919876543210", "Help")]

    @pytest.mark.asyncio
    async def test_failure_outcome_does_not_raise(self):
        transport = FakeTransport(failures={"+123": "Invalid number"})
        outcome = await dispatch(transport, "+123", "Help")

        assert outcome.success is False
        assert outcome.error == "Invalid number"

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_failure(self):
        class BrokenTransport(FakeTransport):
            async def send(self, to, body):
                raise RuntimeError("socket closed")

        outcome = await dispatch(BrokenTransport(), "+123", "Help")
        assert outcome.success is False
        assert outcome.error == "socket closed"

    def test_sent_row_carries_message_and_sid(self):
        db = make_session()
        outcome = DispatchOutcome(destination="+1555", success=True, message_id="SM1")
        entry = record_attempt(db, "uid-1", outcome, "Help")

        assert entry.status == SosStatus.SENT
        assert entry.message == "Help"
        assert entry.message_sid == "SM1"
        assert entry.error is None
        db.add.assert_called_once_with(entry)

    def test_failed_row_carries_error_only(self):
        db = make_session()
        outcome = DispatchOutcome(destination="+1555", success=False, error="boom")
        entry = record_attempt(db, "uid-1", outcome, "Help")

        assert entry.status == SosStatus.FAILED
        assert entry.message is None
        assert entry.message_sid is None
        assert entry.error == "boom"


class TestSendSingle:
    """Tests for send_single()."""

    @pytest.mark.asyncio
    async def test_returns_sid_and_audits(self):
        db = make_session()
        transport = FakeTransport()

        sid = await send_single(
            db,
            transport,
            "uid-1",
            "(987) 654-3210",
            "Help",
            GeoLocation(latitude=1.5, longitude=2.5),
        )

        assert sid.startswith("SM")
        destination, body = transport.sent[0]
        assert destination == "+919876543210"
        assert "?q=1.5,2.5" in body

        [entry] = staged_logs(db)
        assert entry.requester_uid == "uid-1"
        assert entry.to_phone == "+919876543210"
        assert entry.message_sid == sid
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_is_audited_before_raising(self):
        db = make_session()
        transport = FakeTransport(failures={"+919876543210": "Carrier down"})

        with pytest.raises(ApiError) as exc_info:
            await send_single(db, transport, "uid-1", "9876543210", "Help")

        assert exc_info.value.code == ErrorCode.INTERNAL
        assert exc_info.value.message == "Carrier down"
        [entry] = staged_logs(db)
        assert entry.status == SosStatus.FAILED
        assert entry.error == "Carrier down"
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_audit_write_failure_is_internal(self):
        db = make_session()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("store down"))
        transport = FakeTransport()

        with pytest.raises(ApiError) as exc_info:
            await send_single(db, transport, "uid-1", "9876543210", "Help")

        assert exc_info.value.code == ErrorCode.INTERNAL
        assert exc_info.value.message == "Failed to record SOS attempt"
        assert len(transport.sent) == 1
        db.rollback.assert_awaited_once()


class TestSendNotification:
    """Tests for send_notification()."""

    @pytest.mark.asyncio
    async def test_destination_used_as_given_and_audited_anonymously(self):
        db = make_session()
        transport = FakeTransport()

        outcome = await send_notification(db, transport, "+15550109999", "Check in")

        assert outcome.success is True
        assert transport.sent == [("+15550109999", "Check in")]
        [entry] = staged_logs(db)
        assert entry.requester_uid is None
        db.commit.assert_awaited_once()


# ---------------------------------------------------------------------------
# Batch dispatch
# ---------------------------------------------------------------------------
class TestSendBatch:
    """Tests for send_batch()."""

    @pytest.mark.asyncio
    async def test_one_entry_per_contact_in_input_order(self):
        db = make_session()
        transport = FakeTransport()
        contacts = ["(987) 654-3210", "44 20 1234 5678", "+15550109999"]

        results = await send_batch(db, transport, "uid-1", contacts, "Help")

        assert [r.phone for r in results] == contacts
        assert all(r.success for r in results)
        assert all(r.error is None for r in results)
        assert sorted(to for to, _ in transport.sent) == sorted(
            ["+919876543210", "+442012345678", "+15550109999"]
        )

    @pytest.mark.asyncio
    async def test_partial_failure_keeps_both_outcomes(self):
        db = make_session()
        transport = FakeTransport(failures={"+442012345678": "Unreachable number"})

        results = await send_batch(
            db, transport, "uid-1", ["9876543210", "44 20 1234 5678"], "Help"
        )

        assert results[0].phone == "9876543210"
        assert results[0].success is True
        assert results[0].error is None
        assert results[1].phone == "44 20 1234 5678"
        assert results[1].success is False
        assert results[1].error == "Unreachable number"

    @pytest.mark.asyncio
    async def test_every_attempt_is_audited_in_one_commit(self):
        db = make_session()
        transport = FakeTransport(failures={"+442012345678": "Unreachable number"})

        await send_batch(db, transport, "uid-9", ["9876543210", "44 20 1234 5678"], "Help")

        logs = staged_logs(db)
        assert len(logs) == 2
        assert {log.status for log in logs} == {SosStatus.SENT, SosStatus.FAILED}
        assert all(log.requester_uid == "uid-9" for log in logs)
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_overlong_contact_is_audited_with_the_rest(self):
        db = make_session()
        transport = FakeTransport()
        long_phone = "1" * 40

        results = await send_batch(db, transport, "uid-1", ["9876543210", long_phone], "Help")

        assert [r.phone for r in results] == ["9876543210", long_phone]
        assert all(r.success for r in results)
        logs = staged_logs(db)
        assert {log.to_phone for log in logs} == {"+919876543210", f"+{long_phone}"}
        to_phone_type = SosLog.__table__.c.to_phone.type
        assert isinstance(to_phone_type, Text)
        assert to_phone_type.length is None
        db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_audit_write_failure_is_internal(self):
        db = make_session()
        db.commit.side_effect = OperationalError("INSERT", {}, Exception("store down"))
        transport = FakeTransport()

        with pytest.raises(ApiError) as exc_info:
            await send_batch(db, transport, "uid-1", ["9876543210", "9812345678"], "Help")

        assert exc_info.value.code == ErrorCode.INTERNAL
        assert len(transport.sent) == 2
        assert len(staged_logs(db)) == 2
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_location_appended_for_every_contact(self):
        db = make_session()
        transport = FakeTransport()

        await send_batch(
            db,
            transport,
            "uid-1",
            ["9876543210", "9876543211"],
            "Help",
            GeoLocation(latitude=10.0, longitude=20.0),
        )

        assert all("?q=10,20" in body for _, body in transport.sent)

    @pytest.mark.asyncio
    async def test_sends_run_concurrently(self):
        """The first send only completes once the second has started."""
        second_started = asyncio.Event()

        class GatedTransport(FakeTransport):
            async def send(self, to, body):
                if to == "+919876543210":
                    await asyncio.wait_for(second_started.wait(), timeout=1.0)
                else:
                    second_started.set()
                return await super().send(to, body)

        results = await send_batch(
            make_session(), GatedTransport(), "uid-1", ["9876543210", "9876543211"], "Help"
        )
        assert [r.success for r in results] == [True, True]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("contacts", [[], None, "9876543210"])
    async def test_invalid_contacts_rejected_without_sending(self, contacts):
        db = make_session()
        transport = FakeTransport()

        with pytest.raises(ApiError) as exc_info:
            await send_batch(db, transport, "uid-1", contacts, "Help")

        assert exc_info.value.code == ErrorCode.INVALID_ARGUMENT
        assert transport.sent == []
        db.add.assert_not_called()
        db.commit.assert_not_awaited()
