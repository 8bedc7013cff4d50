"""Fixed-interval background task."""

import threading
import time
from typing import Callable, Optional

from ..logging.config import get_logger

logger = get_logger(__name__)


class RecurringTask:
    """
    Calls ``callback`` every ``interval_seconds`` on a daemon thread.

    Runs are scheduled against a monotonic deadline, so a slow callback does
    not push later runs back; slots missed entirely are skipped. The wait is
    an Event wait so ``stop()`` returns promptly. An exception escaping the
    callback is logged and the next period still fires.
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], object],
        name: str = "RecurringTask",
        run_immediately: bool = False,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.interval_seconds = interval_seconds
        self.callback = callback
        self.name = name
        self.run_immediately = run_immediately

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.runs = 0
        self.failures = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._thread:
            return
        # Each run owns its stop event; a thread left behind by a timed-out
        # stop() keeps its set event and exits after its current callback.
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run, args=(self._stop_event,), name=self.name, daemon=True
        )
        self._thread.start()
        logger.info("Recurring task started", task=self.name, interval=self.interval_seconds)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Recurring task still finishing a run", task=self.name)
            self._thread = None
            logger.info("Recurring task stopped", task=self.name)

    def run_once(self) -> bool:
        """Invoke the callback once; returns False if it raised."""
        self.runs += 1
        try:
            self.callback()
            return True
        except Exception as e:
            self.failures += 1
            logger.error("Recurring task callback failed", task=self.name,
                         error=str(e), exc_info=True)
            return False

    def _run(self, stop_event: threading.Event) -> None:
        next_run = time.monotonic()
        if self.run_immediately:
            self.run_once()
        next_run += self.interval_seconds

        while not stop_event.wait(max(0.0, next_run - time.monotonic())):
            self.run_once()
            next_run += self.interval_seconds
            now = time.monotonic()
            if next_run <= now:
                skipped = int((now - next_run) // self.interval_seconds) + 1
                next_run += skipped * self.interval_seconds
                logger.warning("Recurring task overran its interval",
                               task=self.name, skipped=skipped)
