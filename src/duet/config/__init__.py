"""Duet configuration loading."""

from duet.config.settings import (
    ConfigError,
    ContentSettings,
    DuetConfig,
    LoggingSettings,
    LogLevel,
    PreferenceBackend,
    PreferenceSettings,
    ThemeSettings,
    load_config,
)

__all__ = [
    "ConfigError",
    "ContentSettings",
    "DuetConfig",
    "LogLevel",
    "LoggingSettings",
    "PreferenceBackend",
    "PreferenceSettings",
    "ThemeSettings",
    "load_config",
]
