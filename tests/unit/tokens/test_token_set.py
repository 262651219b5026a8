"""Unit tests for immutable token sets."""

from __future__ import annotations

import pytest

from duet.tokens import InvalidTokenSetError, TokenSet


@pytest.mark.unit
def test_nested_payload_is_frozen_and_detached() -> None:
    """Token set should not alias or expose caller-owned containers."""
    # Arrange - mutable payload with nested dict and list
    payload: dict[str, object] = {
        "colors": {"primary": {"main": "#000"}},
        "stack": ["Inter", "sans-serif"],
    }

    # Act - freeze then mutate the source payload
    tokens = TokenSet(payload)
    payload["colors"]["primary"]["main"] = "#fff"  # type: ignore[index]
    payload["stack"].append("serif")  # type: ignore[union-attr]

    # Assert - token set keeps original values in immutable containers
    assert tokens.get_path("colors.primary.main") == "#000"
    assert tokens["stack"] == ("Inter", "sans-serif")
    assert isinstance(tokens["colors"], TokenSet)
    with pytest.raises(TypeError):
        tokens["colors"] = {}  # type: ignore[index]


@pytest.mark.unit
def test_get_path_returns_default_for_missing_or_leaf_prefix() -> None:
    """Dotted lookup should stop at leaves and missing keys."""
    # Arrange - token set with one leaf
    tokens = TokenSet({"spacing": {"lg": "1.5rem"}})

    # Act - look up several paths
    found = tokens.get_path("spacing.lg")
    missing = tokens.get_path("spacing.xl", "fallback")
    through_leaf = tokens.get_path("spacing.lg.value")

    # Assert - only the real path resolves
    assert found == "1.5rem"
    assert missing == "fallback"
    assert through_leaf is None
    assert tokens.has_path("spacing")
    assert not tokens.has_path("spacing.xl")


@pytest.mark.unit
def test_paths_lists_sorted_leaves_including_empty_groups() -> None:
    """Leaf path listing should be sorted and include empty groups."""
    # Arrange - nested tokens with a sequence and an empty group
    tokens = TokenSet(
        {
            "spacing": {"sm": "0.5rem", "lg": "1.5rem"},
            "font": ["Inter"],
            "empty": {},
        }
    )

    # Act - list paths
    paths = tokens.paths()

    # Assert - sorted dotted leaves, sequences as single leaves
    assert paths == ("empty", "font", "spacing.lg", "spacing.sm")


@pytest.mark.unit
def test_fingerprint_ignores_key_order() -> None:
    """Equal content should hash and compare equal regardless of key order."""
    # Arrange - two payloads with different insertion order
    left = TokenSet({"a": 1, "b": {"c": True, "d": None}})
    right = TokenSet({"b": {"d": None, "c": True}, "a": 1})

    # Act - fingerprint both
    left_hash = left.fingerprint()
    right_hash = right.fingerprint()

    # Assert - same fingerprint, equality and hash
    assert left_hash == right_hash
    assert left == right
    assert hash(left) == hash(right)
    assert len(left_hash) == 64


@pytest.mark.unit
@pytest.mark.parametrize(
    ("left", "right"),
    [({"a": True}, {"a": 1}), ({"a": 1}, {"a": 1.0}), ({"a": [0]}, {"a": [False]})],
)
def test_equality_agrees_with_hash(
    left: dict[str, object], right: dict[str, object]
) -> None:
    """Values Python treats as equal but that encode differently stay distinct."""
    # Arrange - token sets differing only by bool, int or float leaves
    left_set = TokenSet(left)
    right_set = TokenSet(right)

    # Assert - unequal, so differing hashes are consistent
    assert left_set != right_set
    assert len({left_set, right_set}) == 2


@pytest.mark.unit
def test_to_dict_returns_plain_mutable_copy() -> None:
    """Thawed output should use dicts and lists again."""
    # Arrange - frozen tokens
    tokens = TokenSet({"stack": ["a", "b"], "group": {"x": 1}})

    # Act - thaw
    plain = tokens.to_dict()

    # Assert - plain containers with original values
    assert plain == {"stack": ["a", "b"], "group": {"x": 1}}
    assert isinstance(plain["group"], dict)


@pytest.mark.unit
@pytest.mark.parametrize(
    "payload",
    [
        ["not", "a", "mapping"],
        {"": "empty key"},
        {1: "numeric key"},
        {"dotted.key": "value"},
        {"group": {"bad.key": 1}},
        {"value": object()},
        {"ratio": float("nan")},
        {"group": {"limit": float("inf")}},
    ],
)
def test_invalid_payloads_raise(payload: object) -> None:
    """Malformed payloads should fail at construction."""
    # Act / Assert - construction raises explicit error
    with pytest.raises(InvalidTokenSetError):
        TokenSet(payload)  # type: ignore[arg-type]
