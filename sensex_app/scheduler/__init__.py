"""
Session-window scheduling and the fetch-and-record cycle.
"""
from .poller import TickPoller
from .runner import RecurringTask
from .session import SessionWindow

__all__ = ["RecurringTask", "SessionWindow", "TickPoller"]
