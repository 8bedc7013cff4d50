"""
In-memory tick buffer.

Holds the current session's ticks per contract expiry for the HTTP layer.
"""
from .tick_store import TickStore

__all__ = ["TickStore"]
