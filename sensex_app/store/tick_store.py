"""In-memory tick buffer keyed by contract expiry."""

import logging
import threading
from datetime import datetime
from typing import Any, Iterable, Optional

from ..data.models import Tick


class TickStore:
    """
    Expiry-keyed, append-only tick buffer with de-duplication on time label.

    One writer (the poller) appends and resets; any number of readers take
    snapshots. Reset swaps in a fresh mapping instead of deleting entries,
    so a reader sees either the old session or the new one.
    """

    def __init__(self):
        self.logger = logging.getLogger("tick.store")
        self._lock = threading.Lock()
        self._buckets: dict[str, list[Tick]] = {}
        self._seen_times: dict[str, set[str]] = {}
        self._last_reset: Optional[datetime] = None

    def record(self, tick: Tick) -> bool:
        """
        Append ``tick`` to its expiry bucket unless its time is already there.

        Returns:
            True if the tick was appended, False if it was a duplicate
        """
        with self._lock:
            seen = self._seen_times.get(tick.expiry)
            if seen is None:
                seen = set()
                self._seen_times[tick.expiry] = seen
                self._buckets[tick.expiry] = []

            if tick.time in seen:
                return False

            seen.add(tick.time)
            self._buckets[tick.expiry].append(tick)
            return True

    def record_many(self, ticks: Iterable[Tick]) -> list[Tick]:
        """Record each tick in order, returning the ones that were appended."""
        return [tick for tick in ticks if self.record(tick)]

    def reset(self, at: Optional[datetime] = None) -> None:
        """Drop every bucket by swapping in an empty mapping."""
        with self._lock:
            self._buckets = {}
            self._seen_times = {}
            self._last_reset = at or datetime.now()
        self.logger.info("Tick store reset")

    def get_ticks(self, expiry: str) -> list[Tick]:
        """Copy of one expiry bucket, empty if unknown."""
        with self._lock:
            return list(self._buckets.get(expiry, ()))

    def get_expiries(self) -> list[str]:
        """Expiry keys in first-seen order."""
        with self._lock:
            return list(self._buckets.keys())

    def snapshot(self) -> dict[str, list[dict[str, Any]]]:
        """
        Serializable copy of the whole store.

        The returned structure shares nothing with the store, so callers
        cannot mutate the buffer through it.
        """
        with self._lock:
            return {
                expiry: [tick.to_dict() for tick in ticks]
                for expiry, ticks in self._buckets.items()
            }

    def stats(self) -> dict[str, Any]:
        """Bucket sizes and last reset time."""
        with self._lock:
            counts = {expiry: len(ticks) for expiry, ticks in self._buckets.items()}
            last_reset = self._last_reset

        return {
            "expiries": len(counts),
            "total_ticks": sum(counts.values()),
            "ticks_per_expiry": counts,
            "last_reset": last_reset.isoformat() if last_reset else None,
        }

    def __len__(self) -> int:
        with self._lock:
            return sum(len(ticks) for ticks in self._buckets.values())
