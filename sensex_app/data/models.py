"""
Canonical data models for normalized ticks.

This module defines immutable data structures that represent clean, validated
price samples after normalization from raw upstream records.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Tick:
    """One observed price sample for a contract expiry."""
    time: str               # Upstream time label or fetch wall-clock HH:MM:SS
    ltp: float              # Last traded price
    expiry: str             # Canonical DD-MM-YYYY expiry key
    prev_close: float = 0.0 # Previous close, 0 when upstream omits it

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the shape the front-end chart consumes."""
        return {
            "time": self.time,
            "ltp": self.ltp,
            "prevClose": self.prev_close,
            "expiry": self.expiry,
        }


@dataclass(frozen=True)
class NormalizationResult:
    """Result of normalizing a batch of upstream records."""

    ticks: list[Tick] = field(default_factory=list)
    rejected: list[tuple[dict[str, Any], str]] = field(default_factory=list)

    @property
    def accepted_count(self) -> int:
        return len(self.ticks)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)
