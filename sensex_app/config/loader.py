"""Configuration loader with 4-tier parameter precedence."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    DefaultConfig,
    LoggingParams,
    NormalizationParams,
    PollingParams,
    ServerParams,
    SessionParams,
    UpstreamParams,
    get_default_config,
)
from .validation import ConfigValidator

SETTINGS_FILENAME = "settings.yaml"


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"Invalid boolean {value!r}")


# env var -> (section, key, converter)
ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "PORT": ("server", "port", int),
    "HOST": ("server", "host", str),
    "SENSEX_UPSTREAM_URL": ("upstream", "url", str),
    "SENSEX_UPSTREAM_TIMEOUT": ("upstream", "timeout_seconds", float),
    "SENSEX_POLL_INTERVAL": ("polling", "interval_seconds", float),
    "SENSEX_RECORD_SELECTION": ("polling", "record_selection", str),
    "SENSEX_LOG_LEVEL": ("logging", "level", str),
    "SENSEX_LOG_JSON": ("logging", "format_json", _parse_bool),
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 4-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)

    @classmethod
    def create(
        cls,
        config_dir: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
            environ=os.environ if environ is None else environ,
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from ``settings.yaml`` in the config directory."""
        settings_file = self.config_dir / SETTINGS_FILENAME

        if not settings_file.exists():
            return {}

        try:
            with open(settings_file) as f:
                file_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Cannot parse {settings_file}: {e}",
                context={"path": str(settings_file)}
            ) from e

        if file_config is None:
            return {}
        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"{settings_file} must contain a mapping",
                context={"path": str(settings_file)}
            )

        # An empty section ("upstream:" with every key commented out) loads as None
        for section, values in file_config.items():
            if values is None:
                file_config[section] = {}
            elif not isinstance(values, dict):
                raise ConfigurationError(
                    f"{settings_file}: section '{section}' must be a mapping",
                    context={"path": str(settings_file), "section": section}
                )

        return file_config

    def load_env_config(self) -> dict[str, Any]:
        """Collect overrides from environment variables."""
        overrides: dict[str, Any] = {}

        for env_name, (section, key, convert) in ENV_OVERRIDES.items():
            raw = self.environ.get(env_name)
            if raw is None or raw == "":
                continue
            try:
                value = convert(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value for {env_name}: {raw!r}",
                    context={"env": env_name}
                ) from e
            overrides.setdefault(section, {})[key] = value

        return overrides

    def merge_config(self, cli_overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 4-tier precedence.

        Priority order:
        1. Command-line overrides (highest priority)
        2. Environment variables
        3. settings.yaml in the config directory
        4. Built-in defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)
        config = self._deep_merge(config, self.load_file_config())
        config = self._deep_merge(config, self.load_env_config())

        if cli_overrides:
            config = self._deep_merge(config, cli_overrides)

        return config

    def load(self, cli_overrides: Optional[dict[str, Any]] = None) -> DefaultConfig:
        """Merge, validate and build the typed configuration."""
        config = self.merge_config(cli_overrides)

        errors = ConfigValidator.validate_settings(config)
        if errors:
            details = "; ".join(f"{e.field}: {e.message} (got {e.value!r})" for e in errors)
            raise ConfigurationError(f"Invalid configuration: {details}", errors=errors)

        return build_config(config)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name, _field in obj.__dataclass_fields__.items():
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def _section(config: dict[str, Any], name: str, params_cls: type) -> Any:
    """Build one params dataclass, ignoring unknown keys."""
    values = config.get(name) or {}
    known = params_cls.__dataclass_fields__
    kwargs = {}
    for key, value in values.items():
        if key not in known:
            continue
        if isinstance(value, list):
            value = tuple(value)
        kwargs[key] = value
    return params_cls(**kwargs)


def build_config(config: dict[str, Any]) -> DefaultConfig:
    """Build a typed configuration from a merged dictionary."""
    return DefaultConfig(
        upstream=_section(config, "upstream", UpstreamParams),
        session=_section(config, "session", SessionParams),
        polling=_section(config, "polling", PollingParams),
        normalization=_section(config, "normalization", NormalizationParams),
        server=_section(config, "server", ServerParams),
        logging=_section(config, "logging", LoggingParams),
    )
