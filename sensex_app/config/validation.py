"""Configuration validation utilities."""

import re
from dataclasses import dataclass
from typing import Any

_CLOCK_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

RECORD_SELECTIONS = ("all", "first")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def parse_clock(value: str) -> tuple[int, int]:
    """Parse an ``HH:MM`` string into an (hour, minute) tuple."""
    match = _CLOCK_RE.match(str(value).strip())
    if not match:
        raise ValueError(f"Invalid clock time {value!r}, expected HH:MM")
    return int(match.group(1)), int(match.group(2))


def _is_positive_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_upstream_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate upstream parameters."""
        errors = []

        url = params.get("url")
        if not isinstance(url, str) or not url.startswith(("http://", "https://")):
            errors.append(ValidationError(
                field="upstream.url",
                message="Must be an http(s) URL",
                value=url
            ))

        timeout = params.get("timeout_seconds")
        if not _is_positive_number(timeout):
            errors.append(ValidationError(
                field="upstream.timeout_seconds",
                message="Must be a positive number",
                value=timeout
            ))

        records_field = params.get("records_field")
        if not isinstance(records_field, str) or not records_field:
            errors.append(ValidationError(
                field="upstream.records_field",
                message="Must be a non-empty string",
                value=records_field
            ))

        return errors

    @staticmethod
    def validate_session_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate session window parameters."""
        errors = []
        parsed = {}

        for name in ("start", "end", "reset_at"):
            value = params.get(name)
            try:
                parsed[name] = parse_clock(value)
            except ValueError:
                errors.append(ValidationError(
                    field=f"session.{name}",
                    message="Must be a clock time in HH:MM format",
                    value=value
                ))

        if "start" in parsed and "end" in parsed and parsed["end"] < parsed["start"]:
            errors.append(ValidationError(
                field="session.end",
                message="Must not be earlier than session.start",
                value=params.get("end")
            ))

        return errors

    @staticmethod
    def validate_polling_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate polling parameters."""
        errors = []

        interval = params.get("interval_seconds")
        if not _is_positive_number(interval):
            errors.append(ValidationError(
                field="polling.interval_seconds",
                message="Must be a positive number",
                value=interval
            ))

        run_immediately = params.get("run_immediately")
        if not isinstance(run_immediately, bool):
            errors.append(ValidationError(
                field="polling.run_immediately",
                message="Must be a boolean",
                value=run_immediately
            ))

        selection = params.get("record_selection")
        if selection not in RECORD_SELECTIONS:
            errors.append(ValidationError(
                field="polling.record_selection",
                message=f"Must be one of {', '.join(RECORD_SELECTIONS)}",
                value=selection
            ))

        return errors

    @staticmethod
    def validate_normalization_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate normalization field lists."""
        errors = []

        for name in ("expiry_fields", "price_fields", "prev_close_fields", "time_fields"):
            value = params.get(name)
            if not isinstance(value, (list, tuple)) or not all(
                isinstance(item, str) and item for item in value
            ):
                errors.append(ValidationError(
                    field=f"normalization.{name}",
                    message="Must be a list of field names",
                    value=value
                ))

        # prev_close is optional; every other lookup needs a field to read
        for name in ("expiry_fields", "price_fields", "time_fields"):
            value = params.get(name)
            if isinstance(value, (list, tuple)) and not value:
                errors.append(ValidationError(
                    field=f"normalization.{name}",
                    message="Must name at least one field",
                    value=value
                ))

        default_expiry = params.get("default_expiry")
        if not isinstance(default_expiry, str) or not default_expiry:
            errors.append(ValidationError(
                field="normalization.default_expiry",
                message="Must be a non-empty string",
                value=default_expiry
            ))

        return errors

    @staticmethod
    def validate_server_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate HTTP server parameters."""
        errors = []

        port = params.get("port")
        if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
            errors.append(ValidationError(
                field="server.port",
                message="Must be an integer between 1 and 65535",
                value=port
            ))

        host = params.get("host")
        if not isinstance(host, str) or not host:
            errors.append(ValidationError(
                field="server.host",
                message="Must be a non-empty string",
                value=host
            ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        level = params.get("level")
        if not isinstance(level, str) or level.upper() not in (
            "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"
        ):
            errors.append(ValidationError(
                field="logging.level",
                message="Must be a standard logging level name",
                value=level
            ))

        return errors

    @classmethod
    def validate_settings(cls, config: dict[str, Any]) -> list[ValidationError]:
        """Validate a fully merged configuration dictionary."""
        return (
            cls.validate_upstream_params(config.get("upstream") or {})
            + cls.validate_session_params(config.get("session") or {})
            + cls.validate_polling_params(config.get("polling") or {})
            + cls.validate_normalization_params(config.get("normalization") or {})
            + cls.validate_server_params(config.get("server") or {})
            + cls.validate_logging_params(config.get("logging") or {})
        )
