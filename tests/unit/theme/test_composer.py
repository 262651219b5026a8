"""Unit tests for persona theme composition."""

from __future__ import annotations

import threading

import pytest

from duet.diagnostics import DiagnosticCode, DiagnosticCollector
from duet.persona import DEFAULT_PERSONA, PersonaKey
from duet.theme import (
    ThemeComposer,
    ThemeRegistry,
    bundled_theme_registry,
    compose,
)


@pytest.mark.unit
@pytest.mark.parametrize("persona", list(PersonaKey))
def test_every_theme_covers_every_base_path(
    composer: ThemeComposer, registry: ThemeRegistry, persona: PersonaKey
) -> None:
    """Composed themes should never drop a base token."""
    # Act - resolve persona theme
    theme = composer.resolve(persona)

    # Assert - every base leaf path survives composition
    assert set(registry.base.paths()) <= set(theme.tokens.paths())


@pytest.mark.unit
def test_override_values_win(composer: ThemeComposer) -> None:
    """Persona overrides should replace base leaves."""
    # Act - resolve both personas
    male = composer.resolve(PersonaKey.MALE)
    female = composer.resolve("female")

    # Assert - persona values present, untouched base values shared
    assert male.token("colors.primary.main") == "#9333EA"
    assert male.token("colors.accent.main") == "#EC4899"
    assert female.token("colors.primary.main") == "#FF7F50"
    assert female.token("typography.family.primary") == ("Poppins", "sans-serif")
    assert female.token("radii.medium") == "0.75rem"
    assert male.token("spacing.lg") == female.token("spacing.lg") == "1.5rem"


@pytest.mark.unit
def test_compose_is_idempotent(registry: ThemeRegistry) -> None:
    """Composing the same override twice should equal composing once."""
    # Arrange - base and one override
    base = registry.base
    override = registry.override_for(PersonaKey.FEMALE)

    # Act - compose once and twice
    once = compose(base, override)
    twice = compose(once, override)

    # Assert - equal token sets
    assert once == twice


@pytest.mark.unit
def test_unrecognized_key_returns_default_theme_object(
    composer: ThemeComposer,
) -> None:
    """Unknown persona keys should return the very same default theme."""
    # Arrange - diagnostic collector
    collector = DiagnosticCollector()

    # Act - resolve default and an unknown key
    default_theme = composer.resolve(DEFAULT_PERSONA)
    fallback = composer.resolve("unknown-persona", on_diagnostic=collector)

    # Assert - identical object plus one diagnostic
    assert fallback is default_theme
    assert collector.codes() == [DiagnosticCode.UNRECOGNIZED_PERSONA_KEY]
    assert collector.items[0].fallback == DEFAULT_PERSONA.value


@pytest.mark.unit
def test_unrecognized_key_is_logged_as_warning(
    composer: ThemeComposer, caplog: pytest.LogCaptureFixture
) -> None:
    """Unknown persona keys should be logged as caller defects."""
    # Act - resolve a non-string key
    with caplog.at_level("WARNING"):
        theme = composer.resolve(None)

    # Assert - default persona theme and warning record
    assert theme.persona == DEFAULT_PERSONA
    assert "unrecognized_persona_key" in caplog.text


@pytest.mark.unit
def test_custom_default_persona_is_used_for_fallback(registry: ThemeRegistry) -> None:
    """Composer default persona should drive the fallback."""
    # Arrange - composer defaulting to female
    composer = ThemeComposer(registry, default_persona=PersonaKey.FEMALE)

    # Act - resolve unknown key
    theme = composer.resolve("neutral")

    # Assert - female theme returned
    assert theme.persona == PersonaKey.FEMALE
    assert composer.default_persona == PersonaKey.FEMALE


@pytest.mark.unit
def test_resolution_is_cached_and_thread_safe(composer: ThemeComposer) -> None:
    """Concurrent resolution should yield one cached theme per persona."""
    # Arrange - worker threads resolving the same persona
    results: list[object] = []
    lock = threading.Lock()

    def worker() -> None:
        theme = composer.resolve(PersonaKey.FEMALE)
        with lock:
            results.append(theme)

    threads = [threading.Thread(target=worker) for _ in range(8)]

    # Act - run workers
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    # Assert - every worker got the same object
    assert len(results) == 8
    assert all(item is results[0] for item in results)


@pytest.mark.unit
def test_preload_profiles_and_names(composer: ThemeComposer) -> None:
    """Composer should expose every registered persona."""
    # Act - preload and list metadata
    themes = composer.preload()
    profiles = composer.profiles()

    # Assert - one entry per persona in declaration order
    assert [theme.persona for theme in themes] == list(PersonaKey)
    assert [profile.persona for profile in profiles] == list(PersonaKey)
    assert composer.theme_names() == ("male", "female")
    assert profiles[0].name == "Male"


@pytest.mark.unit
def test_theme_token_raises_key_error_for_missing_path(
    composer: ThemeComposer,
) -> None:
    """Strict token lookup should raise on unknown paths."""
    # Arrange - resolved theme
    theme = composer.resolve(PersonaKey.MALE)

    # Act / Assert - missing path raises KeyError
    with pytest.raises(KeyError):
        theme.token("colors.missing")
    assert theme.name == "male"
    assert theme.fingerprint() == theme.tokens.fingerprint()


@pytest.mark.unit
def test_cached_theme_profile_metadata_is_read_only() -> None:
    """Profile metadata shared through the cache should not be writable."""
    # Arrange - composer over the packaged themes
    composer = ThemeComposer(bundled_theme_registry())
    theme = composer.resolve(PersonaKey.MALE)

    # Act / Assert - item assignment rejected
    with pytest.raises(TypeError):
        theme.profile.meta["mood"] = "calm"  # type: ignore[index]

    # Assert - later resolves still see the packaged value
    assert composer.resolve(PersonaKey.MALE).profile.meta["mood"] == "energetic"
    assert theme.profile.model_dump()["meta"] == {
        "mood": "energetic",
        "contrast": "high",
    }
