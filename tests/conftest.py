"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest

from duet.theme import ThemeComposer, ThemeRegistry


@pytest.fixture
def workspace_root(tmp_path: Path) -> Path:
    """Temporary project root. .duet will be created under it."""
    return tmp_path


@pytest.fixture
def base_tokens() -> dict[str, object]:
    """Small base token payload."""
    return {
        "colors": {"primary": {"main": "#000000", "light": "#333333"}},
        "spacing": {"sm": "0.5rem", "lg": "1.5rem"},
        "typography": {"family": {"primary": ["Inter", "sans-serif"]}},
        "radii": {"medium": "0.5rem"},
    }


@pytest.fixture
def persona_overrides() -> dict[str, dict[str, object]]:
    """Override payloads for every recognized persona."""
    return {
        "male": {
            "colors": {"primary": {"main": "#9333EA"}, "accent": {"main": "#EC4899"}},
        },
        "female": {
            "colors": {"primary": {"main": "#FF7F50"}},
            "typography": {"family": {"primary": ["Poppins", "sans-serif"]}},
            "radii": {"medium": "0.75rem"},
        },
    }


@pytest.fixture
def registry(
    base_tokens: dict[str, object],
    persona_overrides: dict[str, dict[str, object]],
) -> ThemeRegistry:
    """Validated registry over the small fixture payloads."""
    return ThemeRegistry(base=base_tokens, overrides=persona_overrides)


@pytest.fixture
def composer(registry: ThemeRegistry) -> ThemeComposer:
    """Composer over the fixture registry."""
    return ThemeComposer(registry)
