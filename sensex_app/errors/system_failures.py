"""
System failure error classifications.

Upstream errors abort a single fetch cycle; the scheduler tries again on
the next period. Configuration errors abort start-up.
"""

from typing import Optional, Dict, Any


class SystemFailureError(Exception):
    """Base class for system-level failures."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class UpstreamError(SystemFailureError):
    """The upstream market-data provider could not be used this cycle."""

    def __init__(self, message: str, url: Optional[str] = None,
                 status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code
        # A later cycle may succeed
        self.recoverable = True


class UpstreamUnavailableError(UpstreamError):
    """Network failure, timeout or non-success HTTP status."""
    pass


class MalformedResponseError(UpstreamError):
    """Upstream answered but the body was not valid JSON."""

    def __init__(self, message: str, body_preview: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.body_preview = body_preview


class ConfigurationError(SystemFailureError):
    """Invalid configuration detected while loading settings."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
