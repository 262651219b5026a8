"""Persona key contract and profile metadata."""

from duet.persona.models import (
    DEFAULT_PERSONA,
    PersonaKey,
    PersonaProfile,
    coerce_persona_key,
    parse_persona_key,
    recognized_personas,
)

__all__ = [
    "DEFAULT_PERSONA",
    "PersonaKey",
    "PersonaProfile",
    "coerce_persona_key",
    "parse_persona_key",
    "recognized_personas",
]
