"""Trading session window and session-open detection."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..config.defaults import SessionParams
from ..config.validation import parse_clock
from ..utils.time import format_clock, minute_of_day


@dataclass(frozen=True)
class SessionWindow:
    """Daily polling window, inclusive on both ends, minute resolution."""
    start: tuple[int, int] = (9, 0)
    end: tuple[int, int] = (15, 30)
    reset_at: tuple[int, int] = (9, 15)

    @classmethod
    def from_params(cls, params: Optional[SessionParams] = None) -> "SessionWindow":
        """Build a window from ``HH:MM`` configuration strings."""
        params = params or SessionParams()
        return cls(
            start=parse_clock(params.start),
            end=parse_clock(params.end),
            reset_at=parse_clock(params.reset_at),
        )

    def is_active(self, now: datetime) -> bool:
        """True while polling should happen (e.g. 09:00 through 15:30:59)."""
        return self.start <= minute_of_day(now) <= self.end

    def is_reset_minute(self, now: datetime) -> bool:
        """True during the session-open minute."""
        return minute_of_day(now) == self.reset_at

    def describe(self) -> dict[str, str]:
        return {
            "start": format_clock(self.start),
            "end": format_clock(self.end),
            "reset_at": format_clock(self.reset_at),
        }
