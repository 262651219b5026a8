"""Unit tests for duet config loading."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from duet.config import (
    ConfigError,
    DuetConfig,
    LogLevel,
    PreferenceBackend,
    load_config,
)
from duet.persona import PersonaKey


@pytest.mark.unit
def test_missing_config_returns_defaults(tmp_path: Path) -> None:
    """Absent config files should yield the default config."""
    # Act - load missing file
    config = load_config(tmp_path / "config.yaml")

    # Assert - defaults
    assert config == DuetConfig()
    assert config.themes.registry_path is None
    assert config.themes.default_persona == PersonaKey.MALE
    assert config.content.default_key == "default"
    assert config.content.inactive_persona_keys == ("neutral",)
    assert config.preference.backend == PreferenceBackend.FILE
    assert config.preference.path == ".duet/preference.json"
    assert config.logging.level == LogLevel.INFO


@pytest.mark.unit
def test_yaml_config_overrides_defaults(tmp_path: Path) -> None:
    """YAML config values should override defaults."""
    # Arrange - partial YAML config
    path = tmp_path / "config.yaml"
    path.write_text(
        "themes:\n"
        "  default_persona: female\n"
        "content:\n"
        "  default_key: any\n"
        "preference:\n"
        "  backend: memory\n"
        "logging:\n"
        "  level: DEBUG\n",
        encoding="utf-8",
    )

    # Act - load config
    config = load_config(path)

    # Assert - overrides applied
    assert config.themes.default_persona == PersonaKey.FEMALE
    assert config.content.default_key == "any"
    assert config.preference.backend == PreferenceBackend.MEMORY
    assert config.logging.level == LogLevel.DEBUG


@pytest.mark.unit
def test_json_config_is_supported(tmp_path: Path) -> None:
    """JSON config files should decode as JSON."""
    # Arrange - JSON config
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"content": {"path": "content.yaml"}}), encoding="utf-8"
    )

    # Act - load config
    config = load_config(path)

    # Assert - value loaded
    assert config.content.path == "content.yaml"


@pytest.mark.unit
def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    """An empty YAML document should behave like a missing file."""
    # Arrange - empty file
    path = tmp_path / "config.yaml"
    path.write_text("", encoding="utf-8")

    # Act - load config
    config = load_config(path)

    # Assert - defaults
    assert config == DuetConfig()


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [
        "themes: [unclosed\n",
        "- a list\n",
        "unknown_section: {}\n",
        "themes:\n  default_persona: robot\n",
        "content:\n  default_key: ''\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, raw: str) -> None:
    """Undecodable or invalid payloads should raise ConfigError."""
    # Arrange - invalid config file
    path = tmp_path / "config.yaml"
    path.write_text(raw, encoding="utf-8")

    # Act / Assert - load fails
    with pytest.raises(ConfigError):
        load_config(path)


@pytest.mark.unit
def test_undecodable_config_raises(tmp_path: Path) -> None:
    """Config files that are not UTF-8 should raise ConfigError."""
    # Arrange - config with invalid bytes
    path = tmp_path / "config.yaml"
    path.write_bytes(b"themes: \xff\xfe\n")

    # Act / Assert - load fails with a typed error
    with pytest.raises(ConfigError, match="Unable to read"):
        load_config(path)
