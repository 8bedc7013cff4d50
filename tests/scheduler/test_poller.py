"""Tests for the scheduled fetch-and-record cycle."""

from unittest.mock import Mock

from sensex_app.config.defaults import PollingParams, UpstreamParams
from sensex_app.data.models import Tick
from sensex_app.errors import MalformedResponseError, UpstreamUnavailableError


def record(time: str, ltp: float = 81000.5, expiry: str = "2024-06-27") -> dict:
    return {"expiry_date": expiry, "ltp": ltp, "time": time}


class TestSessionGating:
    """tick() only fetches inside the session window."""

    def test_before_open_no_fetch(self, make_poller, clock, store, sample_payload):
        poller = make_poller(sample_payload)
        clock.set(8, 59)

        assert poller.tick() is False
        assert poller.client.calls == 0
        assert store.snapshot() == {}

    def test_after_close_no_fetch(self, make_poller, clock, store, sample_payload):
        poller = make_poller(sample_payload)
        clock.set(15, 31)

        assert poller.tick() is False
        assert poller.client.calls == 0
        assert store.snapshot() == {}

    def test_last_minute_fetches(self, make_poller, clock, store, sample_payload):
        poller = make_poller(sample_payload)
        clock.set(15, 30)

        assert poller.tick() is True
        assert poller.client.calls == 1
        assert len(store.get_ticks("27-06-2024")) == 1

    def test_outside_window_does_not_reset(self, make_poller, clock, store):
        store.record(Tick(time="15:29:00", ltp=1.0, expiry="27-06-2024"))
        poller = make_poller()
        clock.set(16, 0)

        poller.tick()

        assert len(store) == 1


class TestResetAtOpen:
    """The store is cleared at session open before that cycle's fetch."""

    def test_reset_then_fetch(self, make_poller, clock, store):
        store.record(Tick(time="15:30:00", ltp=1.0, expiry="20-06-2024"))
        poller = make_poller({"resultData": [record("09:15:00")]})
        clock.set(9, 15)

        poller.tick()

        snapshot = store.snapshot()
        assert list(snapshot) == ["27-06-2024"]
        assert snapshot["27-06-2024"][0]["time"] == "09:15:00"

    def test_reset_at_most_once_per_day(self, make_poller, clock, store):
        poller = make_poller(
            {"resultData": [record("09:15:00")]},
            {"resultData": [record("09:15:30")]},
        )
        clock.set(9, 15, 0)
        poller.tick()
        clock.set(9, 15, 30)
        poller.tick()

        times = [t.time for t in store.get_ticks("27-06-2024")]
        assert times == ["09:15:00", "09:15:30"]

    def test_reset_again_next_day(self, make_poller, clock, store):
        poller = make_poller({"resultData": [record("09:15:00")]})
        clock.set(9, 15)
        poller.tick()

        store.record(Tick(time="15:30:00", ltp=1.0, expiry="27-06-2024"))
        clock.moment = clock.moment.replace(day=25)
        poller.tick()

        assert [t.time for t in store.get_ticks("27-06-2024")] == ["09:15:00"]

    def test_no_reset_outside_reset_minute(self, make_poller, clock, store):
        store.record(Tick(time="09:40:00", ltp=1.0, expiry="27-06-2024"))
        poller = make_poller({"resultData": [record("09:41:00")]})
        clock.set(9, 41)

        poller.tick()

        assert len(store.get_ticks("27-06-2024")) == 2


class TestFetchAndRecord:
    """Test the fetch step."""

    def test_records_every_record(self, make_poller, store):
        poller = make_poller({"resultData": [
            record("09:16:00", expiry="2024-06-27"),
            record("09:16:00", expiry="2024-07-25"),
        ]})

        assert poller.fetch_and_record() == 2
        assert store.get_expiries() == ["27-06-2024", "25-07-2024"]

    def test_first_record_selection(self, make_poller, store):
        poller = make_poller(
            {"resultData": [record("09:16:00", expiry="2024-06-27"), record("09:16:00", expiry="2024-07-25")]},
            polling=PollingParams(record_selection="first"),
        )

        assert poller.fetch_and_record() == 1
        assert store.get_expiries() == ["27-06-2024"]

    def test_duplicate_cycle_adds_nothing(self, make_poller, store, sample_payload):
        poller = make_poller(sample_payload)

        assert poller.fetch_and_record() == 1
        assert poller.fetch_and_record() == 0
        assert len(store.get_ticks("27-06-2024")) == 1

    def test_missing_time_uses_fetch_clock(self, make_poller, clock, store):
        poller = make_poller({"resultData": [{"expiry_date": "2024-06-27", "ltp": 5}]})
        clock.set(10, 1, 2)

        poller.fetch_and_record()

        assert store.get_ticks("27-06-2024")[0].time == "10:01:02"

    def test_empty_response_leaves_store(self, make_poller, store):
        store.record(Tick(time="09:16:00", ltp=1.0, expiry="27-06-2024"))
        poller = make_poller({"resultData": []})

        assert poller.fetch_and_record() == 0
        assert len(store) == 1

    def test_absent_records_field(self, make_poller, store):
        poller = make_poller({"something": "else"})
        assert poller.fetch_and_record() == 0
        assert store.snapshot() == {}

    def test_custom_records_field(self, make_poller, store):
        poller = make_poller(
            {"data": [record("09:16:00")]},
            upstream=UpstreamParams(records_field="data"),
        )
        assert poller.fetch_and_record() == 1

    def test_record_without_price_skipped(self, make_poller, store):
        poller = make_poller({"resultData": [
            {"expiry_date": "2024-06-27", "time": "09:16:00"},
            {"expiry_date": "2024-06-27", "last_price": "81001", "time": "09:17:00"},
        ]})

        assert poller.fetch_and_record() == 1
        assert store.get_ticks("27-06-2024")[0].ltp == 81001.0


class TestErrorContainment:
    """No fetch failure escapes the cycle."""

    def test_upstream_unavailable(self, make_poller, store):
        poller = make_poller(UpstreamUnavailableError("Network error: refused", url="http://x"))

        assert poller.fetch_and_record() == 0
        assert "refused" in poller.last_error
        assert store.snapshot() == {}

    def test_malformed_response(self, make_poller, store):
        poller = make_poller(MalformedResponseError("Invalid JSON", url="http://x"))
        assert poller.fetch_and_record() == 0

    def test_non_object_payload(self, make_poller, store):
        poller = make_poller(["not", "an", "object"])
        assert poller.fetch_and_record() == 0
        assert poller.last_error is not None

    def test_unexpected_exception_caught_by_tick(self, make_poller, store):
        client = Mock()
        client.fetch.side_effect = RuntimeError("boom")
        poller = make_poller(client=client)

        assert poller.tick() is True
        assert poller.last_error == "RuntimeError: boom"

    def test_failed_cycle_then_success(self, make_poller, store, sample_payload):
        poller = make_poller(UpstreamUnavailableError("timed out"), sample_payload)

        poller.tick()
        poller.tick()

        assert len(store.get_ticks("27-06-2024")) == 1
        assert poller.cycles == 2
        assert poller.last_error is None


class TestStatus:
    """Test status counters."""

    def test_status_after_cycle(self, make_poller, clock, sample_payload):
        poller = make_poller(sample_payload)
        clock.set(9, 20)
        poller.tick()

        status = poller.status()
        assert status["session_active"] is True
        assert status["cycles"] == 1
        assert status["last_recorded"] == 1
        assert status["last_fetch_at"] == "2024-06-24T09:20:00"
        assert status["window"]["reset_at"] == "09:15"
