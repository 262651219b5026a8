"""Duet config models and loading helpers."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from duet.content import DEFAULT_INACTIVE_PERSONA_KEYS, DEFAULT_VARIANT_KEY
from duet.payload import decode_mapping_file
from duet.persona import DEFAULT_PERSONA, PersonaKey


class PreferenceBackend(StrEnum):
    """Supported preference storage backends."""

    FILE = "file"
    MEMORY = "memory"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ThemeSettings(BaseModel):
    """Theme registry configuration."""

    model_config = ConfigDict(extra="forbid")

    registry_path: str | None = None
    default_persona: PersonaKey = DEFAULT_PERSONA


class ContentSettings(BaseModel):
    """Content resolution configuration."""

    model_config = ConfigDict(extra="forbid")

    default_key: str = Field(default=DEFAULT_VARIANT_KEY, min_length=1)
    inactive_persona_keys: tuple[str, ...] = DEFAULT_INACTIVE_PERSONA_KEYS
    path: str | None = None


class PreferenceSettings(BaseModel):
    """Preference persistence configuration."""

    model_config = ConfigDict(extra="forbid")

    backend: PreferenceBackend = PreferenceBackend.FILE
    path: str = ".duet/preference.json"


class LoggingSettings(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    level: LogLevel = LogLevel.INFO


class DuetConfig(BaseModel):
    """Root duet configuration model."""

    model_config = ConfigDict(extra="forbid")

    themes: ThemeSettings = ThemeSettings()
    content: ContentSettings = ContentSettings()
    preference: PreferenceSettings = PreferenceSettings()
    logging: LoggingSettings = LoggingSettings()


class ConfigError(RuntimeError):
    """Raised when config cannot be decoded or validated."""


def load_config(path: Path) -> DuetConfig:
    """Load duet config from disk, defaulting when missing.

    Args:
        path: Config file path (YAML or JSON).

    Returns:
        Parsed config payload, or defaults when file does not exist.

    Raises:
        ConfigError: If payload decode or validation fails.
    """
    if not path.exists():
        return DuetConfig()
    payload = decode_mapping_file(path, error_cls=ConfigError, label="config")
    try:
        return DuetConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config payload: {exc}") from exc
