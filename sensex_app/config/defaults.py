"""Default configuration parameters for the Sensex tick relay."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class UpstreamParams:
    """Upstream market-data provider parameters."""
    url: str = "http://localhost:5000/api/futures?symbol=sensex"
    timeout_seconds: float = 10.0                    # Bound on a single GET
    records_field: str = "resultData"                # Field holding the records
    user_agent: str = "sensex-app/0.1"


@dataclass(frozen=True)
class SessionParams:
    """Trading session window, local wall-clock, minute resolution."""
    start: str = "09:00"                             # First active minute
    end: str = "15:30"                               # Last active minute (inclusive)
    reset_at: str = "09:15"                          # Session open, buffer cleared


@dataclass(frozen=True)
class PollingParams:
    """Recurring fetch parameters."""
    interval_seconds: float = 60.0
    run_immediately: bool = False                    # Fire once on start-up
    record_selection: str = "all"                    # "all" or "first" (near-month)


@dataclass(frozen=True)
class NormalizationParams:
    """Upstream field names, in priority order."""
    expiry_fields: tuple[str, ...] = ("expiry_date", "expiry", "expiryDate")
    price_fields: tuple[str, ...] = (
        "ltp", "last_price", "lastPrice", "last_traded_price", "cmp",
    )
    prev_close_fields: tuple[str, ...] = ("prev_close", "prevClose", "previous_close")
    time_fields: tuple[str, ...] = ("time", "timestamp", "last_trade_time")
    default_expiry: str = "UNKNOWN"                  # Bucket for records without expiry


@dataclass(frozen=True)
class ServerParams:
    """HTTP API parameters."""
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origin: str = "*"                           # Empty string disables the header


@dataclass(frozen=True)
class LoggingParams:
    """Logging parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    upstream: UpstreamParams = field(default_factory=UpstreamParams)
    session: SessionParams = field(default_factory=SessionParams)
    polling: PollingParams = field(default_factory=PollingParams)
    normalization: NormalizationParams = field(default_factory=NormalizationParams)
    server: ServerParams = field(default_factory=ServerParams)
    logging: LoggingParams = field(default_factory=LoggingParams)


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        upstream=UpstreamParams(),
        session=SessionParams(),
        polling=PollingParams(),
        normalization=NormalizationParams(),
        server=ServerParams(),
        logging=LoggingParams(),
    )
