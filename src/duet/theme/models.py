"""Resolved theme model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from duet.persona import PersonaKey, PersonaProfile
from duet.tokens import TokenSet

_MISSING = object()


class Theme(BaseModel):
    """Base tokens composed with one persona's overrides."""

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)

    persona: PersonaKey
    profile: PersonaProfile
    tokens: TokenSet

    @property
    def name(self) -> str:
        """Persona identifier used for ``data-theme`` attributes."""
        return self.persona.value

    def token(self, path: str) -> object:
        """Return one token value by dotted path.

        Args:
            path: Dotted token path such as ``spacing.lg``.

        Returns:
            Token value.

        Raises:
            KeyError: If the path is not defined by this theme.
        """
        value = self.tokens.get_path(path, _MISSING)
        if value is _MISSING:
            raise KeyError(path)
        return value

    def fingerprint(self) -> str:
        """Return the token content hash.

        Returns:
            Hex sha256 of the composed tokens.
        """
        return self.tokens.fingerprint()
