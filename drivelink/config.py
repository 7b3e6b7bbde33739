"""Configuration management for drivelink.

This module provides the resolver settings model and the manager that loads
it from ``~/.drivelink/config.toml``, applies environment variable overrides
and persists changes.
"""

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from . import __version__
from .exceptions import ConfigError
from .resolver import CANDIDATE_TEMPLATES, SWEEP_TEMPLATE, is_drive_url

DEFAULT_PLACEHOLDER_URL = "https://via.placeholder.com/800x450/f8f9fa/dc3545?text=Image+Access+Error"

# Environment variable -> settings field
ENV_OVERRIDES = {
    "DRIVELINK_PLACEHOLDER_URL": "placeholder_url",
    "DRIVELINK_PROBE_TIMEOUT": "probe_timeout",
    "DRIVELINK_MAX_WORKERS": "max_workers",
    "DRIVELINK_FORMAT_SWEEP": "format_sweep",
}

# Hosts the candidate chain probes
CANDIDATE_HOSTS = frozenset(urlparse(template).netloc for template in (*CANDIDATE_TEMPLATES, SWEEP_TEMPLATE))


class Settings(BaseModel):
    """Resolver and prober settings."""

    placeholder_url: str = Field(
        default=DEFAULT_PLACEHOLDER_URL,
        description="Image shown when every candidate fails",
    )
    probe_timeout: float = Field(default=10.0, description="HTTP probe timeout in seconds")
    max_workers: int = Field(default=4, description="Images resolved concurrently in bulk mode")
    thumbnail_width: int = Field(default=800, description="Width for thumbnail link variants")
    format_sweep: bool = Field(default=False, description="Append format=<ext> candidates")
    require_image_content_type: bool = Field(
        default=True,
        description="Only count responses with an image/* content type as loaded",
    )
    user_agent: str = Field(default=f"drivelink/{__version__}")

    @field_validator("placeholder_url")
    @classmethod
    def validate_placeholder_url(cls, v: str) -> str:
        """Placeholder must be a plain http(s) URL outside Google Drive."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Placeholder URL must be an http(s) URL")

        if is_drive_url(v) or parsed.netloc.lower() in CANDIDATE_HOSTS:
            raise ValueError("Placeholder URL cannot point at Google Drive")
        return v

    @field_validator("probe_timeout")
    @classmethod
    def validate_probe_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Probe timeout must be greater than 0")
        if v > 120:
            raise ValueError("Probe timeout cannot exceed 120 seconds")
        return v

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Max workers must be at least 1")
        if v > 32:
            raise ValueError("Max workers cannot exceed 32")
        return v

    @field_validator("thumbnail_width")
    @classmethod
    def validate_thumbnail_width(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("Thumbnail width must be positive")
        return v


class ConfigManager:
    """Loads, overrides and saves drivelink settings."""

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        """Initialize configuration manager.

        Args:
            config_dir: Configuration directory path. If None, uses default.
        """
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".drivelink"
        self.config_file = self.config_dir / "config.toml"
        self._file_values: Dict[str, Any] = {}
        self._load_config()

    def get_settings(self, **overrides: Any) -> Settings:
        """Build effective settings.

        Precedence, lowest to highest: defaults, config file, environment,
        explicit overrides (CLI options). ``None`` overrides are ignored.

        Raises:
            ConfigError: If the combined values are invalid
        """
        values = dict(self._file_values)
        values.update(self.get_environment_overrides())
        values.update({key: value for key, value in overrides.items() if value is not None})

        try:
            return Settings(**values)
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid configuration: {_first_error(e)}")

    def get_environment_overrides(self) -> Dict[str, Any]:
        """Settings values taken from DRIVELINK_* environment variables."""
        values = {}
        for env_var, field in ENV_OVERRIDES.items():
            value = os.getenv(env_var)
            if value:
                values[field] = value
        return values

    def set_value(self, key: str, value: Any) -> Settings:
        """Validate and persist one setting.

        Raises:
            ConfigError: If the key is unknown or the value invalid
        """
        if key not in Settings.model_fields:
            raise ConfigError(
                f"Unknown setting '{key}'. Known settings: {', '.join(Settings.model_fields)}"
            )

        candidate = dict(self._file_values)
        candidate[key] = value
        try:
            settings = Settings(**candidate)
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid value for '{key}': {_first_error(e)}")

        self._file_values[key] = getattr(settings, key)
        self._save_config()
        return settings

    def reset(self) -> None:
        """Drop every stored setting and remove the config file."""
        self._file_values = {}
        if self.config_file.exists():
            self.config_file.unlink()

    def to_dict(self) -> Dict[str, Any]:
        """Effective settings plus where each value came from."""
        settings = self.get_settings()
        env_values = self.get_environment_overrides()
        rows = {}
        for key, value in settings.model_dump().items():
            if key in env_values:
                source = "env"
            elif key in self._file_values:
                source = "file"
            else:
                source = "default"
            rows[key] = {"value": value, "source": source}
        return rows

    def _load_config(self) -> None:
        """Load configuration from file."""
        if not self.config_file.exists():
            return

        try:
            with open(self.config_file, "rb") as f:
                config_data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load configuration: {e}")

        settings_data = config_data.get("settings", {})
        unknown = set(settings_data) - set(Settings.model_fields)
        if unknown:
            raise ConfigError(f"Unknown settings in {self.config_file}: {', '.join(sorted(unknown))}")

        self._file_values = dict(settings_data)

    def _save_config(self) -> None:
        """Save configuration to file."""
        lines = [
            "# drivelink configuration",
            'version = "1.0"',
            "",
            "[settings]",
        ]
        for key, value in self._file_values.items():
            lines.append(f"{key} = {_toml_value(value)}")

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w", encoding="utf-8") as f:
                f.write("\n".join(lines) + "\n")
        except OSError as e:
            raise ConfigError(f"Failed to save configuration: {e}")


def _toml_value(value: Any) -> str:
    # tomllib is read-only, so scalars are written by hand
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(str(value))


def _first_error(error: PydanticValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", str(error))
    return f"{location}: {message}" if location else message
