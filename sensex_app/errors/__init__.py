"""
Error classification for the tick relay.

Data quality errors describe problems with individual upstream records or
response shapes and are recovered from by skipping the offending data.
System failures describe problems talking to the upstream provider or
loading configuration.
"""

from .data_quality import (
    DataQualityError,
    MissingDataError,
    MalformedDataError,
)
from .system_failures import (
    SystemFailureError,
    UpstreamError,
    UpstreamUnavailableError,
    MalformedResponseError,
    ConfigurationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingDataError",
    "MalformedDataError",
    # System Failures
    "SystemFailureError",
    "UpstreamError",
    "UpstreamUnavailableError",
    "MalformedResponseError",
    "ConfigurationError",
]
