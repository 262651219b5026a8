"""Deep merge of token sets with explicit leaf/container semantics."""

from __future__ import annotations

from collections.abc import Mapping

from duet.tokens.models import InvalidTokenSetError, TokenSet, TokenValue


def deep_merge(
    base: TokenSet | Mapping[str, object],
    override: TokenSet | Mapping[str, object],
) -> TokenSet:
    """Merge ``override`` onto ``base`` and return a new token set.

    Rules:
        - both sides nested mappings: merged key by key, recursively;
        - anything else: the override value replaces the base value wholesale.
          Sequences are leaves, so gradient stop lists and similar ordered
          data are replaced, never concatenated.

    Neither input is mutated.

    Args:
        base: Base token set.
        override: Override token set.

    Returns:
        Composed token set.
    """
    base_set = _as_token_set(base, "base")
    override_set = _as_token_set(override, "override")
    return TokenSet(_merge_sets(base_set, override_set))


def shadowed_containers(
    base: TokenSet | Mapping[str, object],
    override: TokenSet | Mapping[str, object],
) -> tuple[str, ...]:
    """List paths where an override changes a base token's shape.

    A leaf shadowing a non-empty container drops every base token below it,
    and a non-empty container shadowing a base leaf (or an empty base group)
    moves that token one level down. Either way a base path vanishes from the
    merged set, so theme registries reject such overrides up front.

    Args:
        base: Base token set.
        override: Override token set.

    Returns:
        Sorted dotted paths of offending overrides.
    """
    found: list[str] = []
    _collect_shadowed(
        _as_token_set(base, "base"), _as_token_set(override, "override"), "", found
    )
    return tuple(sorted(found))


def _as_token_set(value: object, label: str) -> TokenSet:
    if isinstance(value, TokenSet):
        return value
    if not isinstance(value, Mapping):
        raise InvalidTokenSetError(
            f"{label} token set must be a mapping, got {type(value).__name__}."
        )
    return TokenSet(value)


def _merge_sets(base: TokenSet, override: TokenSet) -> dict[str, TokenValue]:
    merged: dict[str, TokenValue] = dict(base.items())
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, TokenSet) and isinstance(value, TokenSet):
            merged[key] = TokenSet(_merge_sets(current, value))
        else:
            merged[key] = value
    return merged


def _collect_shadowed(
    base: TokenSet, override: TokenSet, prefix: str, found: list[str]
) -> None:
    for key, value in override.items():
        if key not in base:
            continue
        path = f"{prefix}.{key}" if prefix else key
        current = base[key]
        base_group = _is_group(current)
        if base_group and isinstance(value, TokenSet):
            _collect_shadowed(current, value, path, found)
        elif base_group or _is_group(value):
            found.append(path)


def _is_group(value: object) -> bool:
    return isinstance(value, TokenSet) and len(value) > 0
