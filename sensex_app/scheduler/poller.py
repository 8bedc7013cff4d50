"""
Scheduled fetch-and-record cycle.

Each scheduler firing calls ``TickPoller.tick``. Inside the session window
it clears the buffer at session open, then fetches the upstream quotes,
normalizes them and appends the new ticks to the store. Every failure is
contained inside the cycle so the next firing always runs.
"""

from datetime import date, datetime
from typing import Any, Optional, Protocol

from ..config.defaults import NormalizationParams, PollingParams, UpstreamParams
from ..data.normalizer import TickNormalizer
from ..data.parsers import extract_records
from ..errors import DataQualityError, UpstreamError
from ..logging.config import get_logger, log_tick_recorded
from ..store.tick_store import TickStore
from ..utils.time import Clock, local_now
from .session import SessionWindow

logger = get_logger(__name__)


class QuoteSource(Protocol):
    """Anything that can fetch the upstream JSON payload."""

    url: str

    def fetch(self) -> Any:
        ...


class TickPoller:
    """
    Drives one polling cycle per scheduler firing.

    Owns all writes to the tick store: session-open resets and appends of
    newly observed ticks.
    """

    def __init__(
        self,
        store: TickStore,
        client: QuoteSource,
        normalizer: Optional[TickNormalizer] = None,
        window: Optional[SessionWindow] = None,
        clock: Clock = local_now,
        polling: Optional[PollingParams] = None,
        upstream: Optional[UpstreamParams] = None,
    ) -> None:
        self.store = store
        self.client = client
        self.normalizer = normalizer or TickNormalizer(NormalizationParams())
        self.window = window or SessionWindow()
        self.clock = clock
        self.polling = polling or PollingParams()
        self.upstream = upstream or UpstreamParams()

        self._last_reset_date: Optional[date] = None

        # Counters surfaced on /api/status
        self.cycles = 0
        self.last_fetch_at: Optional[datetime] = None
        self.last_recorded = 0
        self.last_error: Optional[str] = None

    def is_session_active(self) -> bool:
        return self.window.is_active(self.clock())

    def tick(self) -> bool:
        """
        Run one scheduled cycle.

        Returns:
            True if the cycle ran (inside the session window), False otherwise
        """
        now = self.clock()

        if not self.window.is_active(now):
            logger.debug("Outside session window, skipping", now=now.isoformat())
            return False

        self.cycles += 1

        try:
            self.reset_if_session_open(now)
            self.fetch_and_record(now)
        except Exception as e:
            # Nothing escapes to the scheduler loop
            self.last_error = f"{type(e).__name__}: {e}"
            logger.error("Polling cycle failed", error=str(e), exc_info=True)

        return True

    def reset_if_session_open(self, now: datetime) -> bool:
        """Clear the store at session open, at most once per calendar day."""
        if not self.window.is_reset_minute(now):
            return False

        if self._last_reset_date == now.date():
            return False

        self.store.reset(at=now)
        self._last_reset_date = now.date()
        logger.info("Reset Sensex ticks at market open", date=now.date().isoformat())
        return True

    def fetch_and_record(self, now: Optional[datetime] = None) -> int:
        """
        Fetch upstream quotes and append new ticks to the store.

        Args:
            now: Fetch wall-clock time, read from the clock if omitted

        Returns:
            Number of ticks appended this cycle
        """
        if now is None:
            now = self.clock()

        self.last_fetch_at = now
        self.last_recorded = 0

        try:
            payload = self.client.fetch()
            records = extract_records(
                payload,
                self.upstream.records_field,
                self.normalizer.params.expiry_fields,
            )
        except UpstreamError as e:
            self.last_error = str(e)
            logger.warning(
                "Upstream fetch failed",
                url=e.url,
                status_code=e.status_code,
                error=str(e)
            )
            return 0
        except DataQualityError as e:
            self.last_error = str(e)
            logger.warning("Unexpected upstream payload shape", error=str(e), context=e.context)
            return 0

        if not records:
            logger.info("No records in upstream response", field=self.upstream.records_field)
            return 0

        if self.polling.record_selection == "first":
            # Near-month contract only
            records = records[:1]

        logger.debug("Fetched records", count=len(records), records=records)

        result = self.normalizer.normalize_records(records, now)
        if result.rejected_count:
            logger.warning(
                "Rejected upstream records",
                rejected=result.rejected_count,
                accepted=result.accepted_count
            )

        appended = self.store.record_many(result.ticks)
        for tick in appended:
            log_tick_recorded(logger, tick.expiry, tick.time, tick.ltp)

        self.last_recorded = len(appended)
        self.last_error = None
        return len(appended)

    def status(self) -> dict[str, Any]:
        """Cycle counters for the status endpoint."""
        return {
            "session_active": self.is_session_active(),
            "window": self.window.describe(),
            "cycles": self.cycles,
            "last_fetch_at": self.last_fetch_at.isoformat() if self.last_fetch_at else None,
            "last_recorded": self.last_recorded,
            "last_error": self.last_error,
        }
