"""Persona theme composition and cached resolution."""

from __future__ import annotations

import logging
from threading import Lock

from duet.diagnostics import DiagnosticSink
from duet.persona import DEFAULT_PERSONA, PersonaKey, PersonaProfile, coerce_persona_key
from duet.theme.models import Theme
from duet.theme.registry import ThemeRegistry
from duet.tokens import TokenSet, deep_merge

_LOGGER = logging.getLogger(__name__)


def compose(base: TokenSet, override: TokenSet) -> TokenSet:
    """Compose one base token set with one override set.

    Args:
        base: Shared base tokens.
        override: Persona override tokens.

    Returns:
        New token set; inputs are untouched.
    """
    return deep_merge(base, override)


class ThemeComposer:
    """Resolve persona keys to composed themes.

    Resolution never raises for bad keys: anything outside the recognized set
    resolves to ``default_persona`` and emits an ``unrecognized_persona_key``
    diagnostic. Composed themes are cached per persona, so an unknown key and
    the default persona return the very same Theme object.
    """

    def __init__(
        self,
        registry: ThemeRegistry,
        *,
        default_persona: PersonaKey = DEFAULT_PERSONA,
    ) -> None:
        """Create composer over one validated registry.

        Args:
            registry: Theme registry.
            default_persona: Fallback persona for unrecognized keys.
        """
        self._registry = registry
        self._default_persona = default_persona
        self._cache: dict[PersonaKey, Theme] = {}
        self._lock = Lock()

    @property
    def default_persona(self) -> PersonaKey:
        """Persona used when callers pass an unrecognized key."""
        return self._default_persona

    def resolve(
        self,
        persona_key: object,
        *,
        on_diagnostic: DiagnosticSink | None = None,
    ) -> Theme:
        """Return the composed theme for one persona key.

        Args:
            persona_key: Persona key, usually a ``PersonaKey`` or its string value.
            on_diagnostic: Optional sink for unrecognized-key diagnostics.

        Returns:
            Composed theme.
        """
        persona = coerce_persona_key(
            persona_key,
            default=self._default_persona,
            on_diagnostic=on_diagnostic,
        )
        cached = self._cache.get(persona)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._cache.get(persona)
            if cached is None:
                cached = self._build(persona)
                self._cache[persona] = cached
        return cached

    def preload(self) -> tuple[Theme, ...]:
        """Compose every registered persona theme eagerly.

        Returns:
            Themes in persona declaration order.
        """
        return tuple(self.resolve(persona) for persona in self._registry.personas())

    def profiles(self) -> tuple[PersonaProfile, ...]:
        """Return display metadata for every registered persona.

        Returns:
            Profiles in persona declaration order.
        """
        return tuple(
            self._registry.profile_for(persona)
            for persona in self._registry.personas()
        )

    def theme_names(self) -> tuple[str, ...]:
        """Return registered persona identifiers.

        Returns:
            Persona key values.
        """
        return tuple(persona.value for persona in self._registry.personas())

    def _build(self, persona: PersonaKey) -> Theme:
        tokens = compose(self._registry.base, self._registry.override_for(persona))
        _LOGGER.debug(
            "theme.compose persona=%s paths=%d fingerprint=%s",
            persona.value,
            len(tokens.paths()),
            tokens.fingerprint()[:12],
        )
        return Theme(
            persona=persona,
            profile=self._registry.profile_for(persona),
            tokens=tokens,
        )
