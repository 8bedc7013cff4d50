"""Pytest configuration and shared fixtures."""

from datetime import datetime
from typing import Any, Callable

import pytest

from sensex_app.data.normalizer import TickNormalizer
from sensex_app.scheduler.poller import TickPoller
from sensex_app.scheduler.session import SessionWindow
from sensex_app.store.tick_store import TickStore


class StubQuoteSource:
    """Upstream stand-in returning queued payloads or raising queued errors."""

    url = "http://upstream.test/api/futures?symbol=sensex"

    def __init__(self, *responses: Any):
        self.responses = list(responses)
        self.calls = 0

    def fetch(self) -> Any:
        self.calls += 1
        if not self.responses:
            return {"resultData": []}
        response = self.responses[0] if len(self.responses) == 1 else self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class MutableClock:
    """Clock whose current time tests can move."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def set(self, hour: int, minute: int, second: int = 0) -> None:
        self.moment = self.moment.replace(hour=hour, minute=minute, second=second)


@pytest.fixture
def sample_payload() -> dict[str, Any]:
    """Upstream body with one near-month record."""
    return {
        "resultData": [
            {"expiry_date": "2024-06-27", "ltp": "81000.5", "time": "09:16:00"},
        ]
    }


@pytest.fixture
def store() -> TickStore:
    return TickStore()


@pytest.fixture
def clock() -> MutableClock:
    return MutableClock(datetime(2024, 6, 24, 10, 0, 0))


@pytest.fixture
def make_poller(store: TickStore, clock: MutableClock) -> Callable[..., TickPoller]:
    """Factory for pollers over the shared store and clock."""

    def _make(*responses: Any, **kwargs: Any) -> TickPoller:
        return TickPoller(
            store=store,
            client=kwargs.pop("client", None) or StubQuoteSource(*responses),
            normalizer=kwargs.pop("normalizer", None) or TickNormalizer(),
            window=kwargs.pop("window", None) or SessionWindow(),
            clock=clock,
            **kwargs,
        )

    return _make
