"""Unit tests for persona content resolution."""

from __future__ import annotations

import pytest

from duet.content import ContentResolver
from duet.diagnostics import DiagnosticCode, DiagnosticCollector
from duet.persona import PersonaKey

_MODULE = {
    "title": {"male": "Level Up", "female": "Glow Up", "default": "Welcome"},
    "steps": [
        {"default": "Read the intro"},
        {"male": "Crush it", "female": "You got this"},
        "Plain step",
    ],
    "badge": {"icon": "star", "label": {"female": "Queen", "default": "Champ"}},
    "points": 50,
}


@pytest.mark.unit
def test_default_used_when_persona_branch_absent() -> None:
    """Variant nodes without the requested persona use the default branch."""
    # Arrange - node with male and default branches
    resolver = ContentResolver()
    node = {"male": "x", "default": "y"}

    # Act - resolve for female
    resolved = resolver.resolve(node, PersonaKey.FEMALE)

    # Assert - default copy
    assert resolved == "y"


@pytest.mark.unit
def test_exact_persona_branches_are_selected() -> None:
    """Each persona should receive its own branch."""
    # Arrange - node with both persona branches
    resolver = ContentResolver()
    node = {"male": "x", "female": "z"}

    # Act - resolve for both personas
    male = resolver.resolve(node, "male")
    female = resolver.resolve(node, "female")

    # Assert - exact branches
    assert male == "x"
    assert female == "z"


@pytest.mark.unit
def test_composites_keep_shape_and_resolve_children() -> None:
    """Lists and plain mappings keep order and keys."""
    # Arrange - realistic module tree
    resolver = ContentResolver()

    # Act - resolve for female
    resolved = resolver.resolve(_MODULE, PersonaKey.FEMALE)

    # Assert - every variant node collapsed, literals untouched
    assert resolved == {
        "title": "Glow Up",
        "steps": ["Read the intro", "You got this", "Plain step"],
        "badge": {"icon": "star", "label": "Queen"},
        "points": 50,
    }
    assert isinstance(resolved, dict)
    assert list(resolved) == ["title", "steps", "badge", "points"]


@pytest.mark.unit
def test_tuples_stay_tuples() -> None:
    """Tuple composites should resolve to tuples."""
    # Arrange - tuple of variant nodes
    resolver = ContentResolver()
    node = ({"default": "a"}, {"male": "b", "female": "c"})

    # Act - resolve for male
    resolved = resolver.resolve(node, PersonaKey.MALE)

    # Assert - tuple preserved
    assert resolved == ("a", "b")


@pytest.mark.unit
@pytest.mark.parametrize("empty", [{}, [], ()], ids=["dict", "list", "tuple"])
def test_empty_composites_keep_their_kind(empty: object) -> None:
    """Empty composites should resolve to an empty composite of the same kind."""
    # Arrange - resolver and collector
    resolver = ContentResolver()
    collector = DiagnosticCollector()

    # Act - resolve the empty composite
    resolved = resolver.resolve(empty, PersonaKey.FEMALE, on_diagnostic=collector)

    # Assert - same empty kind, no diagnostics, empty mapping is plain content
    assert type(resolved) is type(empty)
    assert resolved == empty
    assert collector.codes() == []
    assert not resolver.is_variant_node({})
    assert resolver.resolve({"nested": {}}, PersonaKey.MALE) == {"nested": {}}


@pytest.mark.unit
@pytest.mark.parametrize("persona", list(PersonaKey))
def test_resolution_is_idempotent(persona: PersonaKey) -> None:
    """Resolving resolved output again should change nothing."""
    # Arrange - resolver and tree
    resolver = ContentResolver()

    # Act - resolve twice
    once = resolver.resolve(_MODULE, persona)
    twice = resolver.resolve(once, persona)

    # Assert - stable output
    assert once == twice


@pytest.mark.unit
def test_nested_variant_branches_are_resolved() -> None:
    """Chosen branches are themselves resolved."""
    # Arrange - variant node whose branch holds another variant node
    resolver = ContentResolver()
    node = {"default": {"cta": {"male": "Go", "female": "Let's go"}}}

    # Act - resolve for female
    resolved = resolver.resolve(node, "female")

    # Assert - no variant node left
    assert resolved == {"cta": "Let's go"}


@pytest.mark.unit
def test_missing_variant_falls_back_to_default_persona_branch() -> None:
    """Missing variants should use the default persona branch and report it."""
    # Arrange - node declaring male and neutral only
    resolver = ContentResolver()
    collector = DiagnosticCollector()
    node = {"intro": {"male": "Yo", "neutral": "Hello there"}}

    # Act - resolve for female
    resolved = resolver.resolve(node, PersonaKey.FEMALE, on_diagnostic=collector)

    # Assert - default persona branch plus located diagnostic
    assert resolved == {"intro": "Yo"}
    assert collector.codes() == [DiagnosticCode.MISSING_VARIANT]
    diagnostic = collector.items[0]
    assert diagnostic.location == "intro"
    assert diagnostic.persona == "female"
    assert diagnostic.fallback == "male"


@pytest.mark.unit
def test_missing_variant_falls_back_to_first_declared_key() -> None:
    """Without the default persona branch the first sorted key wins."""
    # Arrange - resolver defaulting to male, node with female and neutral
    resolver = ContentResolver()
    collector = DiagnosticCollector()
    node = {"neutral": "N", "female": "F"}

    # Act - resolve for male
    resolved = resolver.resolve(node, PersonaKey.MALE, on_diagnostic=collector)

    # Assert - lexicographically-first declared key
    assert resolved == "F"
    assert collector.items[0].fallback == "female"


@pytest.mark.unit
def test_inactive_persona_key_never_matches() -> None:
    """Inactive persona branches are never selected by request."""
    # Arrange - node with neutral and default
    resolver = ContentResolver()
    node = {"neutral": "N", "default": "D"}

    # Act - resolve with the inactive key as persona
    collector = DiagnosticCollector()
    resolved = resolver.resolve(node, "neutral", on_diagnostic=collector)

    # Assert - default copy and unrecognized-key diagnostic
    assert resolved == "D"
    assert collector.codes() == [DiagnosticCode.UNRECOGNIZED_PERSONA_KEY]


@pytest.mark.unit
def test_unrecognized_persona_uses_default_copy(
    caplog: pytest.LogCaptureFixture,
) -> None:
    """Unknown persona keys resolve as if no persona matched."""
    # Arrange - node with all branches
    resolver = ContentResolver()

    # Act - resolve with unknown key
    with caplog.at_level("WARNING"):
        resolved = resolver.resolve(
            {"male": "M", "female": "F", "default": "D"}, "robot"
        )

    # Assert - default copy and logged defect
    assert resolved == "D"
    assert "unrecognized_persona_key" in caplog.text


@pytest.mark.unit
def test_plain_mappings_are_not_variant_nodes() -> None:
    """Only mappings keyed entirely by variant keys are variant nodes."""
    # Arrange - resolver
    resolver = ContentResolver()

    # Act / Assert - detection rules
    assert resolver.is_variant_node({"male": 1, "default": 2})
    assert resolver.is_variant_node({"female": 1})
    assert not resolver.is_variant_node({})
    assert not resolver.is_variant_node({"neutral": "only inactive"})
    assert not resolver.is_variant_node({"male": 1, "title": 2})
    assert not resolver.is_variant_node(["male"])


@pytest.mark.unit
def test_custom_default_key() -> None:
    """Resolver default key should be configurable."""
    # Arrange - resolver using "any" as default key
    resolver = ContentResolver(default_key="any")

    # Act - resolve node using the custom key
    resolved = resolver.resolve({"male": "M", "any": "A"}, PersonaKey.FEMALE)

    # Assert - custom default branch used
    assert resolved == "A"
    assert resolver.default_key == "any"
