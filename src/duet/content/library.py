"""Loaded content payloads with persona-resolved section access."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from pathlib import Path
from threading import Lock

from duet.content.resolver import ContentResolver
from duet.diagnostics import DiagnosticSink
from duet.payload import decode_mapping_file
from duet.persona import PersonaKey, parse_persona_key


class ContentLoadError(RuntimeError):
    """Raised when a content payload cannot be decoded."""


def load_content(path: Path) -> dict[str, object]:
    """Load one content payload from YAML or JSON.

    Args:
        path: Content document path.

    Returns:
        Raw content tree.

    Raises:
        ContentLoadError: If the document is missing or cannot be decoded.
    """
    if not path.is_file():
        raise ContentLoadError(f"Content file not found: {path}")
    return decode_mapping_file(path, error_cls=ContentLoadError, label="content")


class ContentLibrary:
    """Content tree with cached per-persona resolution.

    Sections follow the app layout: ``modules.module<N>``, ``gamification``
    and ``ui``. Missing sections resolve to an empty mapping.
    """

    def __init__(
        self,
        content: Mapping[str, object],
        *,
        resolver: ContentResolver | None = None,
        on_diagnostic: DiagnosticSink | None = None,
    ) -> None:
        """Create library.

        Args:
            content: Raw content tree. Treated as read-only.
            resolver: Resolver to use; defaults to standard settings.
            on_diagnostic: Sink for diagnostics raised during first resolution.
        """
        self._content = content
        self._resolver = resolver or ContentResolver()
        self._on_diagnostic = on_diagnostic
        self._resolved: dict[PersonaKey | None, Mapping[str, object]] = {}
        self._lock = Lock()

    @classmethod
    def from_file(
        cls,
        path: Path,
        *,
        resolver: ContentResolver | None = None,
        on_diagnostic: DiagnosticSink | None = None,
    ) -> ContentLibrary:
        """Load a library from one content document.

        Args:
            path: Content document path.
            resolver: Resolver to use.
            on_diagnostic: Diagnostic sink.

        Returns:
            Loaded content library.
        """
        return cls(load_content(path), resolver=resolver, on_diagnostic=on_diagnostic)

    def resolved(self, persona_key: object) -> Mapping[str, object]:
        """Return the whole content tree resolved for one persona.

        Resolution runs once per persona; every call returns a fresh copy so
        callers cannot alter what later calls see.

        Args:
            persona_key: Active persona key.

        Returns:
            Resolved tree.
        """
        return copy.deepcopy(self._cached_tree(persona_key))

    def section(self, path: str, persona_key: object) -> object:
        """Return one resolved section by dotted path.

        Args:
            path: Dotted section path, e.g. ``modules.module1.intro``.
            persona_key: Active persona key.

        Returns:
            Copy of the resolved section, or an empty mapping when the path is
            missing.
        """
        node: object = self._cached_tree(persona_key)
        for part in path.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return {}
            node = node[part]
        return copy.deepcopy(node)

    def module(self, module_id: int | str, persona_key: object) -> object:
        """Return resolved content for one learning module.

        Args:
            module_id: Module number, e.g. ``1``.
            persona_key: Active persona key.

        Returns:
            Module content or an empty mapping.
        """
        return self.section(f"modules.module{module_id}", persona_key)

    def gamification(self, persona_key: object) -> object:
        """Return resolved badge, achievement and celebration copy."""
        return self.section("gamification", persona_key)

    def ui(self, persona_key: object) -> object:
        """Return resolved UI labels and helper copy."""
        return self.section("ui", persona_key)

    def _cached_tree(self, persona_key: object) -> Mapping[str, object]:
        persona = parse_persona_key(persona_key)
        cached = self._resolved.get(persona)
        if cached is not None:
            return cached
        with self._lock:
            cached = self._resolved.get(persona)
            if cached is None:
                tree = self._resolver.resolve(
                    self._content, persona_key, on_diagnostic=self._on_diagnostic
                )
                cached = tree if isinstance(tree, Mapping) else {}
                self._resolved[persona] = cached
        return cached
