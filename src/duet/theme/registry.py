"""Static theme registry: one base token set plus per-persona overrides."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from duet.payload import decode_mapping_file
from duet.persona import PersonaKey, PersonaProfile, parse_persona_key
from duet.tokens import InvalidTokenSetError, TokenSet, shadowed_containers

_BASE_FILE_STEM = "base"
_THEME_SUFFIXES = (".yaml", ".yml", ".json")


class _ProfileFields(BaseModel):
    """Validated persona profile fields from a registry document."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = None
    variant: str = ""
    description: str = ""
    meta: dict[str, str] = Field(default_factory=dict)


class _PersonaThemeEntry(BaseModel):
    """One persona's registry entry."""

    model_config = ConfigDict(extra="forbid")

    profile: _ProfileFields = Field(default_factory=_ProfileFields)
    tokens: Any = Field(default_factory=dict)


class _RegistryDocument(BaseModel):
    """Single-file registry layout."""

    model_config = ConfigDict(extra="forbid")

    base: Any
    personas: dict[str, _PersonaThemeEntry]


class ThemeRegistry:
    """Validated base token set and one override set per recognized persona."""

    def __init__(
        self,
        *,
        base: TokenSet | Mapping[str, object],
        overrides: Mapping[str, TokenSet | Mapping[str, object]],
        profiles: Mapping[str, PersonaProfile] | None = None,
    ) -> None:
        """Validate and freeze registry contents.

        Args:
            base: Shared base token set.
            overrides: Override token set per persona key.
            profiles: Optional display metadata per persona key.

        Raises:
            InvalidTokenSetError: If the base or any override is malformed, a
                recognized persona has no override, an unknown persona is
                registered, or an override would drop base tokens.
        """
        if not isinstance(base, Mapping):
            raise InvalidTokenSetError(
                f"Base token set must be a mapping, got {type(base).__name__}."
            )
        self._base = base if isinstance(base, TokenSet) else TokenSet(base)
        self._overrides = _validate_overrides(self._base, overrides)
        self._profiles = _build_profiles(profiles or {})

    @property
    def base(self) -> TokenSet:
        """Shared base token set."""
        return self._base

    def override_for(self, persona: PersonaKey) -> TokenSet:
        """Return the override token set registered for one persona.

        Args:
            persona: Recognized persona key.

        Returns:
            Override token set.
        """
        return self._overrides[persona]

    def profile_for(self, persona: PersonaKey) -> PersonaProfile:
        """Return display metadata for one persona.

        Args:
            persona: Recognized persona key.

        Returns:
            Persona profile.
        """
        return self._profiles[persona]

    def personas(self) -> tuple[PersonaKey, ...]:
        """Return registered personas in declaration order.

        Returns:
            Persona keys.
        """
        return tuple(PersonaKey)


def load_theme_registry(path: Path) -> ThemeRegistry:
    """Load a theme registry from one document or a theme directory.

    A single document has the shape ``{base: {...}, personas: {<key>: {profile,
    tokens}}}``. A directory holds ``base.yaml`` (bare tokens) plus one
    ``<persona>.yaml`` file per persona with ``profile`` and ``tokens`` keys.

    Args:
        path: Registry file or directory.

    Returns:
        Validated registry.

    Raises:
        InvalidTokenSetError: If the registry cannot be read or is malformed.
    """
    if path.is_dir():
        return _load_directory(path)
    if not path.exists():
        raise InvalidTokenSetError(f"Theme registry not found: {path}")
    payload = decode_mapping_file(
        path, error_cls=InvalidTokenSetError, label="theme registry"
    )
    try:
        document = _RegistryDocument.model_validate(payload)
    except ValidationError as exc:
        raise InvalidTokenSetError(
            f"Invalid theme registry '{path.name}': {exc}"
        ) from exc
    return _registry_from_entries(document.base, document.personas)


def bundled_theme_root() -> Path:
    """Return the packaged default theme directory.

    Returns:
        Directory containing bundled theme documents.
    """
    return Path(__file__).resolve().parents[1] / "themes"


def bundled_theme_registry() -> ThemeRegistry:
    """Load the packaged default themes.

    Returns:
        Validated registry for the bundled themes.
    """
    return load_theme_registry(bundled_theme_root())


def _load_directory(root: Path) -> ThemeRegistry:
    base_path = _find_document(root, _BASE_FILE_STEM)
    if base_path is None:
        raise InvalidTokenSetError(f"Theme directory '{root}' is missing base tokens.")
    base = decode_mapping_file(
        base_path, error_cls=InvalidTokenSetError, label="base tokens"
    )
    entries: dict[str, _PersonaThemeEntry] = {}
    for candidate in sorted(root.iterdir()):
        if candidate.suffix.lower() not in _THEME_SUFFIXES:
            continue
        if candidate.stem == _BASE_FILE_STEM:
            continue
        payload = decode_mapping_file(
            candidate, error_cls=InvalidTokenSetError, label="persona theme"
        )
        try:
            entries[candidate.stem] = _PersonaThemeEntry.model_validate(payload)
        except ValidationError as exc:
            raise InvalidTokenSetError(
                f"Invalid persona theme '{candidate.name}': {exc}"
            ) from exc
    return _registry_from_entries(base, entries)


def _find_document(root: Path, stem: str) -> Path | None:
    for suffix in _THEME_SUFFIXES:
        candidate = root / f"{stem}{suffix}"
        if candidate.is_file():
            return candidate
    return None


def _registry_from_entries(
    base: object, entries: Mapping[str, _PersonaThemeEntry]
) -> ThemeRegistry:
    if not isinstance(base, Mapping):
        raise InvalidTokenSetError(
            f"Base token set must be a mapping, got {type(base).__name__}."
        )
    overrides: dict[str, Mapping[str, object]] = {}
    profiles: dict[str, PersonaProfile] = {}
    for raw_key, entry in entries.items():
        persona = _require_persona(raw_key)
        if not isinstance(entry.tokens, Mapping):
            raise InvalidTokenSetError(
                f"Override tokens for persona '{raw_key}' must be a mapping."
            )
        overrides[raw_key] = entry.tokens
        profiles[raw_key] = PersonaProfile(
            persona=persona,
            name=entry.profile.name or persona.value.title(),
            variant=entry.profile.variant,
            description=entry.profile.description,
            meta=entry.profile.meta,
        )
    return ThemeRegistry(base=base, overrides=overrides, profiles=profiles)


def _require_persona(raw_key: str) -> PersonaKey:
    persona = parse_persona_key(raw_key)
    if persona is None:
        raise InvalidTokenSetError(
            f"Theme registry entry for unknown persona '{raw_key}'. "
            f"Expected one of: {', '.join(key.value for key in PersonaKey)}."
        )
    return persona


def _validate_overrides(
    base: TokenSet,
    overrides: Mapping[str, TokenSet | Mapping[str, object]],
) -> dict[PersonaKey, TokenSet]:
    validated: dict[PersonaKey, TokenSet] = {}
    for raw_key, override in overrides.items():
        persona = _require_persona(str(raw_key))
        if persona in validated:
            raise InvalidTokenSetError(
                f"Duplicate theme registry entry for persona '{persona.value}'."
            )
        if not isinstance(override, Mapping):
            raise InvalidTokenSetError(
                f"Override tokens for persona '{persona.value}' must be a mapping."
            )
        tokens = override if isinstance(override, TokenSet) else TokenSet(override)
        shadowed = shadowed_containers(base, tokens)
        if shadowed:
            raise InvalidTokenSetError(
                f"Override for persona '{persona.value}' changes the shape of base "
                f"tokens at: {', '.join(shadowed)}"
            )
        validated[persona] = tokens
    missing = [key.value for key in PersonaKey if key not in validated]
    if missing:
        raise InvalidTokenSetError(
            f"Theme registry is missing overrides for: {', '.join(missing)}"
        )
    return validated


def _build_profiles(
    profiles: Mapping[str, PersonaProfile],
) -> dict[PersonaKey, PersonaProfile]:
    built = {
        persona: PersonaProfile(persona=persona, name=persona.value.title())
        for persona in PersonaKey
    }
    for raw_key, profile in profiles.items():
        persona = _require_persona(str(raw_key))
        built[persona] = profile
    return built
