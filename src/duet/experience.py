"""Consumer-facing facade wiring themes, content and onboarding together."""

from __future__ import annotations

import logging
from pathlib import Path

from duet.config import DuetConfig, PreferenceBackend
from duet.content import ContentLibrary, ContentResolver
from duet.diagnostics import DiagnosticSink
from duet.onboarding import (
    NavigationHandler,
    OnboardingEvent,
    OnboardingFlow,
    OnboardingState,
)
from duet.persona import PersonaKey
from duet.preference import (
    FilePreferenceStore,
    InMemoryPreferenceStore,
    PreferenceStore,
)
from duet.theme import (
    Theme,
    ThemeComposer,
    bundled_theme_registry,
    load_theme_registry,
)

_LOGGER = logging.getLogger(__name__)


class PersonaExperience:
    """Single entry point for UI code.

    Every dependency is passed in explicitly; rendering code receives resolved
    themes and content from here instead of reading ambient state.
    """

    def __init__(
        self,
        *,
        composer: ThemeComposer,
        resolver: ContentResolver,
        store: PreferenceStore,
        content: ContentLibrary | None = None,
        on_navigate: NavigationHandler | None = None,
        on_diagnostic: DiagnosticSink | None = None,
    ) -> None:
        """Create facade.

        Args:
            composer: Theme composer over a validated registry.
            resolver: Content resolver.
            store: Preference persistence.
            content: Optional loaded content library.
            on_navigate: Navigation callback for committed onboarding flows.
            on_diagnostic: Sink for developer-facing resolution diagnostics.
        """
        self._composer = composer
        self._resolver = resolver
        self._store = store
        self._content = content
        self._on_navigate = on_navigate
        self._on_diagnostic = on_diagnostic
        self._flow = OnboardingFlow(store, on_navigate=on_navigate)

    @property
    def composer(self) -> ThemeComposer:
        """Theme composer."""
        return self._composer

    @property
    def content(self) -> ContentLibrary | None:
        """Loaded content library, when configured."""
        return self._content

    @property
    def store(self) -> PreferenceStore:
        """Preference store."""
        return self._store

    def get_theme(self, persona_key: object) -> Theme:
        """Return the composed theme for a persona key.

        Args:
            persona_key: Persona key; unrecognized keys fall back to the default.

        Returns:
            Composed theme.
        """
        return self._composer.resolve(persona_key, on_diagnostic=self._on_diagnostic)

    def get_content(self, node: object, persona_key: object) -> object:
        """Resolve one content tree for a persona key.

        Args:
            node: Content tree.
            persona_key: Persona key.

        Returns:
            Resolved content.
        """
        return self._resolver.resolve(
            node, persona_key, on_diagnostic=self._on_diagnostic
        )

    def get_onboarding_state(self) -> OnboardingState:
        """Return the onboarding state, running the preference check if pending.

        Returns:
            Current onboarding state.
        """
        return self._flow.start()

    def dispatch(self, event: OnboardingEvent) -> OnboardingState:
        """Forward one user event to the onboarding flow.

        Args:
            event: Onboarding event.

        Returns:
            State after the event.
        """
        return self._flow.dispatch(event)

    def active_persona(self) -> PersonaKey | None:
        """Return the committed persona, if onboarding has completed.

        Returns:
            Committed persona or None.
        """
        state = self.get_onboarding_state()
        return state.persona if state.is_terminal else None

    def reset_onboarding(self) -> OnboardingState:
        """Clear the stored preference and start a fresh onboarding flow.

        Returns:
            State of the new flow (``selection``).
        """
        self._store.clear()
        self._flow = OnboardingFlow(self._store, on_navigate=self._on_navigate)
        _LOGGER.info("onboarding.reset")
        return self._flow.start()


def build_experience(
    config: DuetConfig,
    *,
    root: Path | None = None,
    on_navigate: NavigationHandler | None = None,
    on_diagnostic: DiagnosticSink | None = None,
) -> PersonaExperience:
    """Build the facade from config, failing fast on a broken theme registry.

    Args:
        config: Loaded duet config.
        root: Base directory for relative config paths; defaults to the cwd.
        on_navigate: Navigation callback.
        on_diagnostic: Diagnostic sink.

    Returns:
        Ready-to-use facade.

    Raises:
        InvalidTokenSetError: If the theme registry is malformed.
        ContentLoadError: If a configured content file cannot be loaded.
    """
    base_dir = root or Path.cwd()
    if config.themes.registry_path:
        registry = load_theme_registry(base_dir / config.themes.registry_path)
    else:
        registry = bundled_theme_registry()
    composer = ThemeComposer(registry, default_persona=config.themes.default_persona)
    composer.preload()

    resolver = ContentResolver(
        default_key=config.content.default_key,
        inactive_persona_keys=config.content.inactive_persona_keys,
        default_persona=config.themes.default_persona,
    )
    content = None
    if config.content.path:
        content = ContentLibrary.from_file(
            base_dir / config.content.path,
            resolver=resolver,
            on_diagnostic=on_diagnostic,
        )

    store: PreferenceStore
    if config.preference.backend == PreferenceBackend.MEMORY:
        store = InMemoryPreferenceStore()
    else:
        store = FilePreferenceStore(base_dir / config.preference.path)

    return PersonaExperience(
        composer=composer,
        resolver=resolver,
        store=store,
        content=content,
        on_navigate=on_navigate,
        on_diagnostic=on_diagnostic,
    )
