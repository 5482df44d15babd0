"""Configuration management for CardioDashboard.

Uses attrs with validators for type-safe, validated configuration.
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Callable

import attrs
from attrs import define, field
from loguru import logger


def positive_float(instance, attribute, value):
    """Validator: ensure value is a positive float."""
    if value <= 0:
        raise ValueError(f"{attribute.name} must be positive, got {value}")


def positive_int(instance, attribute, value):
    """Validator: ensure value is a positive integer."""
    if value <= 0:
        raise ValueError(f"{attribute.name} must be positive, got {value}")


def unit_interval(instance, attribute, value):
    """Validator: ensure value lies in [0, 1]."""
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{attribute.name} must be in [0, 1], got {value}")


def route_path(instance, attribute, value):
    """Validator: ensure a route is an absolute URL path."""
    if not value.startswith("/"):
        raise ValueError(f"{attribute.name} must start with '/', got {value!r}")


@define
class BackendConfig:
    """Where the ECG backend lives and which routes it serves."""

    base_url: str = field(default="http://127.0.0.1:8000", validator=attrs.validators.instance_of(str))
    # None disables request timeouts; a hung call then stays Pending
    timeout: float | None = field(
        default=None, validator=attrs.validators.optional([attrs.validators.instance_of(float), positive_float])
    )

    generate_signal_path: str = field(default="/api/generate-ecg", validator=[attrs.validators.instance_of(str), route_path])
    train_model_path: str = field(default="/api/train-model", validator=[attrs.validators.instance_of(str), route_path])
    compute_risk_path: str = field(
        default="/api/calculate-heart-failure-risk", validator=[attrs.validators.instance_of(str), route_path]
    )
    render_chart_path: str = field(default="/api/plot-ecg", validator=[attrs.validators.instance_of(str), route_path])
    set_level_path: str = field(default="/api/set-abnormality-level", validator=[attrs.validators.instance_of(str), route_path])


@define
class DashboardConfig:
    """Initial dashboard state and orchestration policies."""

    initial_abnormality_level: float = field(default=0.5, validator=[attrs.validators.instance_of(float), unit_interval])
    initial_channel: str = field(default="normal", validator=attrs.validators.in_(["normal", "abnormal"]))
    stale_risk_policy: str = field(default="apply", validator=attrs.validators.in_(["apply", "discard"]))


@define
class GUIConfig:
    """GUI configuration with window size and colors."""

    window_width: int = field(default=1200, validator=[attrs.validators.instance_of(int), positive_int])
    window_height: int = field(default=900, validator=[attrs.validators.instance_of(int), positive_int])

    # Plot settings
    plot_background: str = field(default="white", validator=attrs.validators.instance_of(str))
    plot_line_color: str = field(default="#8884d8", validator=attrs.validators.instance_of(str))
    grid_alpha: float = field(default=0.3, validator=[attrs.validators.instance_of(float), unit_interval])
    chart_max_height: int = field(default=400, validator=[attrs.validators.instance_of(int), positive_int])

    # Risk level colors
    risk_color_low: str = field(default="#2e7d32", validator=attrs.validators.instance_of(str))  # Green
    risk_color_moderate: str = field(default="#ed6c02", validator=attrs.validators.instance_of(str))  # Orange
    risk_color_high: str = field(default="#d32f2f", validator=attrs.validators.instance_of(str))  # Red

    # Slider resolution (steps across [0, 1])
    level_slider_steps: int = field(default=100, validator=[attrs.validators.instance_of(int), positive_int])


@define
class LoggingConfig:
    """Loguru sink configuration."""

    level: str = field(
        default="INFO", validator=attrs.validators.in_(["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR"])
    )
    log_file: str | None = field(default="cardio_dashboard.log", validator=attrs.validators.optional(attrs.validators.instance_of(str)))
    file_level: str = field(default="DEBUG", validator=attrs.validators.instance_of(str))
    rotation: str = field(default="10 MB", validator=attrs.validators.instance_of(str))
    retention: str = field(default="7 days", validator=attrs.validators.instance_of(str))


def _parse_timeout(raw: str) -> float | None:
    raw = raw.strip()
    return None if raw.lower() in ("", "none") else float(raw)


# Environment variable suffix -> (config section, attribute, parser)
_ENV_OVERRIDES: dict[str, tuple[str, str, Callable[[str], Any]]] = {
    "BASE_URL": ("backend", "base_url", str),
    "TIMEOUT": ("backend", "timeout", _parse_timeout),
    "LOG_LEVEL": ("logging", "level", str.upper),
    "WINDOW_WIDTH": ("gui", "window_width", int),
    "WINDOW_HEIGHT": ("gui", "window_height", int),
}


# JSON section name -> config class
_SECTION_TYPES: dict[str, type] = {
    "backend": BackendConfig,
    "dashboard": DashboardConfig,
    "gui": GUIConfig,
    "logging": LoggingConfig,
}


@define
class AppConfig:
    """Complete dashboard configuration, one attribute per JSON section."""

    backend: BackendConfig = field(factory=BackendConfig)
    dashboard: DashboardConfig = field(factory=DashboardConfig)
    gui: GUIConfig = field(factory=GUIConfig)
    logging: LoggingConfig = field(factory=LoggingConfig)

    @classmethod
    def default(cls) -> AppConfig:
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AppConfig:
        """Build from parsed JSON. Missing sections or keys keep their defaults.

        Raises:
            ValueError/TypeError: If a value fails its validator
        """
        return cls(**{name: section(**data.get(name, {})) for name, section in _SECTION_TYPES.items()})

    def to_dict(self) -> dict[str, Any]:
        return attrs.asdict(self)

    def save(self, filepath: str | Path) -> None:
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2))

    @classmethod
    def load(cls, filepath: str | Path) -> AppConfig:
        return cls.from_dict(json.loads(Path(filepath).read_text()))


class ConfigManager:
    """Resolves the active configuration.

    Lookup order is user_config.json, then default_config.json, then built-in
    defaults (which are written out as default_config.json). CDB_* variables
    from _ENV_OVERRIDES are applied on top, e.g. CDB_BASE_URL or CDB_TIMEOUT=none.

    Args:
        config_dir: Where the JSON files live; defaults to ~/.cardio_dashboard
    """

    ENV_PREFIX = "CDB_"

    def __init__(self, config_dir: str | Path | None = None):
        self.config_dir = Path(config_dir) if config_dir is not None else Path.home() / ".cardio_dashboard"
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.user_config_path = self.config_dir / "user_config.json"
        self.default_config_path = self.config_dir / "default_config.json"
        self._config: AppConfig | None = None

    def get_config(self) -> AppConfig:
        if self._config is None:
            config = self._read_first_existing()
            self._apply_env_overrides(config)
            self._config = config
        return self._config

    def _read_first_existing(self) -> AppConfig:
        for path in (self.user_config_path, self.default_config_path):
            if path.exists():
                logger.debug(f"Loading configuration from {path}")
                return AppConfig.load(path)

        config = AppConfig.default()
        config.save(self.default_config_path)
        logger.debug(f"Wrote default configuration to {self.default_config_path}")
        return config

    def _apply_env_overrides(self, config: AppConfig) -> None:
        for suffix, (section, attr, parse) in _ENV_OVERRIDES.items():
            raw = os.environ.get(self.ENV_PREFIX + suffix)
            if raw is None:
                continue
            setattr(getattr(config, section), attr, parse(raw))
            logger.debug(f"{self.ENV_PREFIX}{suffix} overrides {section}.{attr}")

    def save_user_config(self) -> None:
        """Persist the active configuration as user_config.json."""
        if self._config is not None:
            self._config.save(self.user_config_path)

    def reset_to_defaults(self) -> None:
        """Drop user_config.json and fall back to built-in defaults."""
        self._config = AppConfig.default()
        self.user_config_path.unlink(missing_ok=True)


_config_manager: ConfigManager | None = None


def get_config_manager() -> ConfigManager:
    """Process-wide ConfigManager, created on first use."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> AppConfig:
    """Active configuration of the process-wide ConfigManager.

    Example:
        >>> from cardio_dashboard.config import get_config
        >>> get_config().backend.base_url
        'http://127.0.0.1:8000'
    """
    return get_config_manager().get_config()
