"""Persona-aware content resolution.

Content trees are plain JSON/YAML-shaped data. Any mapping whose keys are all
variant keys (recognized personas, the default key, or known-inactive
personas) is a persona variant node and collapses to exactly one branch;
every other mapping or sequence is a composite and keeps its shape.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence

from duet.diagnostics import Diagnostic, DiagnosticCode, DiagnosticSink, report
from duet.persona import DEFAULT_PERSONA, PersonaKey, parse_persona_key

_LOGGER = logging.getLogger(__name__)

DEFAULT_VARIANT_KEY = "default"
DEFAULT_INACTIVE_PERSONA_KEYS = ("neutral",)

type ContentNode = object


class ContentResolver:
    """Collapse persona variant nodes for one active persona.

    Lookup order for a variant node:
        1. the branch for the requested persona, when it is recognized;
        2. the ``default`` branch;
        3. otherwise the node is missing a variant. The fallback is the
           designated default persona's branch when declared, else the
           lexicographically-first declared key. A ``missing_variant``
           diagnostic is emitted either way.

    The chosen branch is itself resolved, so output never contains variant
    nodes and resolving twice yields the same value.
    """

    def __init__(
        self,
        *,
        default_key: str = DEFAULT_VARIANT_KEY,
        inactive_persona_keys: Iterable[str] = DEFAULT_INACTIVE_PERSONA_KEYS,
        default_persona: PersonaKey = DEFAULT_PERSONA,
    ) -> None:
        """Create resolver.

        Args:
            default_key: Distinguished key for persona-independent fallback copy.
            inactive_persona_keys: Persona keys content may declare even though
                they are not active; they never match a request.
            default_persona: Persona whose branch is the missing-variant fallback.
        """
        self._default_key = default_key
        self._persona_keys = frozenset(key.value for key in PersonaKey)
        self._inactive_keys = frozenset(inactive_persona_keys) - self._persona_keys
        self._variant_keys = (
            self._persona_keys | self._inactive_keys | {self._default_key}
        )
        self._default_persona = default_persona

    @property
    def default_key(self) -> str:
        """Distinguished default variant key."""
        return self._default_key

    def is_variant_node(self, node: object) -> bool:
        """Return whether a node is a persona variant node.

        Args:
            node: Candidate content node.

        Returns:
            True for non-empty mappings keyed only by variant keys that declare at
            least one recognized persona or the default key.
        """
        if not isinstance(node, Mapping) or not node:
            return False
        keys = set(node.keys())
        if not keys <= self._variant_keys:
            return False
        return bool(keys & (self._persona_keys | {self._default_key}))

    def is_well_formed(self, node: Mapping[str, object]) -> bool:
        """Return whether a variant node declares the default or every persona.

        Args:
            node: Persona variant node.

        Returns:
            True when resolution can never hit the missing-variant fallback.
        """
        return self._default_key in node or self._persona_keys <= set(node.keys())

    def resolve(
        self,
        node: ContentNode,
        persona_key: object,
        *,
        on_diagnostic: DiagnosticSink | None = None,
    ) -> object:
        """Resolve one content tree for a persona.

        Args:
            node: Content tree.
            persona_key: Active persona key. Unrecognized keys are reported and
                match no persona branch, so default copy is used.
            on_diagnostic: Optional sink for resolution diagnostics.

        Returns:
            Tree of the same shape with every variant node collapsed.
        """
        persona = parse_persona_key(persona_key)
        if persona is None:
            report(
                _LOGGER,
                Diagnostic(
                    code=DiagnosticCode.UNRECOGNIZED_PERSONA_KEY,
                    message=f"Unrecognized persona key {persona_key!r}.",
                    persona=repr(persona_key),
                    fallback=self._default_key,
                ),
                on_diagnostic,
            )
        return self._resolve(node, persona, "", on_diagnostic)

    def _resolve(
        self,
        node: object,
        persona: PersonaKey | None,
        location: str,
        on_diagnostic: DiagnosticSink | None,
    ) -> object:
        if isinstance(node, Mapping):
            if self.is_variant_node(node):
                key = self._select_branch(node, persona, location, on_diagnostic)
                return self._resolve(node[key], persona, location, on_diagnostic)
            return {
                key: self._resolve(
                    child, persona, _join_key(location, key), on_diagnostic
                )
                for key, child in node.items()
            }
        if isinstance(node, (str, bytes, bytearray)):
            return node
        if isinstance(node, tuple):
            return tuple(
                self._resolve(child, persona, f"{location}[{index}]", on_diagnostic)
                for index, child in enumerate(node)
            )
        if isinstance(node, Sequence):
            return [
                self._resolve(child, persona, f"{location}[{index}]", on_diagnostic)
                for index, child in enumerate(node)
            ]
        return node

    def _select_branch(
        self,
        node: Mapping[str, object],
        persona: PersonaKey | None,
        location: str,
        on_diagnostic: DiagnosticSink | None,
    ) -> str:
        if persona is not None and persona.value in node:
            return persona.value
        if self._default_key in node:
            return self._default_key
        if self._default_persona.value in node:
            fallback = self._default_persona.value
        else:
            fallback = sorted(node.keys())[0]
        report(
            _LOGGER,
            Diagnostic(
                code=DiagnosticCode.MISSING_VARIANT,
                message=(
                    f"Variant node declares {sorted(node.keys())} but neither the "
                    f"requested persona nor '{self._default_key}'."
                ),
                persona=persona.value if persona is not None else None,
                location=location or None,
                fallback=fallback,
            ),
            on_diagnostic,
        )
        return fallback


def _join_key(location: str, key: object) -> str:
    return f"{location}.{key}" if location else str(key)
