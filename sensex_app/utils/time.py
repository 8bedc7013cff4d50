"""
Wall-clock helpers for session scheduling.

The scheduler never reads the system clock directly; it calls a ``Clock``
so tests can drive it with fixed datetimes.
"""

from datetime import datetime
from typing import Callable

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Current local wall-clock time, naive."""
    return datetime.now()


def fixed_clock(moment: datetime) -> Clock:
    """Clock that always returns ``moment``."""
    return lambda: moment


def minute_of_day(moment: datetime) -> tuple[int, int]:
    """(hour, minute) of a moment, for minute-resolution comparisons."""
    return moment.hour, moment.minute


def format_clock(hour_minute: tuple[int, int]) -> str:
    """Render an (hour, minute) tuple as HH:MM."""
    return f"{hour_minute[0]:02d}:{hour_minute[1]:02d}"
