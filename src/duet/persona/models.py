"""Persona key contract and profile metadata models."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from duet.diagnostics import Diagnostic, DiagnosticCode, DiagnosticSink, report

_LOGGER = logging.getLogger(__name__)


class PersonaKey(StrEnum):
    """Closed set of recognized persona identifiers."""

    MALE = "male"
    FEMALE = "female"


DEFAULT_PERSONA = PersonaKey.MALE


class PersonaProfile(BaseModel):
    """Display metadata for one persona variant."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    persona: PersonaKey
    name: str = Field(min_length=1)
    variant: str = ""
    description: str = ""
    meta: Mapping[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator("meta")
    @classmethod
    def _freeze_meta(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("meta")
    def _dump_meta(self, value: Mapping[str, str]) -> dict[str, str]:
        return dict(value)


def recognized_personas() -> tuple[PersonaKey, ...]:
    """Return recognized persona keys in declaration order.

    Returns:
        Every recognized persona key.
    """
    return tuple(PersonaKey)


def parse_persona_key(value: object) -> PersonaKey | None:
    """Parse one persona key without raising.

    Args:
        value: Candidate key; strings are matched case-insensitively.

    Returns:
        Matching persona key, or None when the value is not recognized.
    """
    if isinstance(value, PersonaKey):
        return value
    if not isinstance(value, str):
        return None
    normalized = value.strip().lower()
    try:
        return PersonaKey(normalized)
    except ValueError:
        return None


def coerce_persona_key(
    value: object,
    *,
    default: PersonaKey = DEFAULT_PERSONA,
    on_diagnostic: DiagnosticSink | None = None,
) -> PersonaKey:
    """Resolve a caller-supplied key, falling back to the default persona.

    Args:
        value: Candidate persona key.
        default: Persona used when ``value`` is not recognized.
        on_diagnostic: Optional sink for the unrecognized-key diagnostic.

    Returns:
        Recognized persona key.
    """
    parsed = parse_persona_key(value)
    if parsed is not None:
        return parsed
    report(
        _LOGGER,
        Diagnostic(
            code=DiagnosticCode.UNRECOGNIZED_PERSONA_KEY,
            message=f"Unrecognized persona key {value!r}.",
            persona=repr(value),
            fallback=default.value,
        ),
        on_diagnostic,
    )
    return default
