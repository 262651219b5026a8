"""Immutable design token sets."""

from __future__ import annotations

import math
from collections.abc import Iterator, Mapping, Sequence

from duet.tokens.canonical import hash_payload

PATH_SEPARATOR = "."

type TokenLeaf = str | int | float | bool | None
type TokenValue = TokenLeaf | tuple[TokenValue, ...] | TokenSet

_MISSING = object()


class InvalidTokenSetError(ValueError):
    """Raised when a token payload cannot form a well-defined TokenSet."""


class TokenSet(Mapping[str, "TokenValue"]):
    """Read-only nested mapping of design token names to values.

    Nested mappings are frozen into TokenSets and sequences into tuples at
    construction, so a TokenSet never changes after it is built and never
    aliases caller-owned containers.
    """

    __slots__ = ("_data", "_fingerprint")

    def __init__(self, payload: Mapping[str, object] | None = None) -> None:
        """Freeze one token payload.

        Args:
            payload: Nested mapping of token names to values.

        Raises:
            InvalidTokenSetError: If the payload is not a mapping, a key is not
                a dot-free string, or a value has an unsupported type.
        """
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise InvalidTokenSetError(
                f"Token set must be a mapping, got {type(payload).__name__}."
            )
        self._data: dict[str, TokenValue] = {
            _validate_key(key, ""): _freeze(value, str(key))
            for key, value in payload.items()
        }
        self._fingerprint: str | None = None

    def __getitem__(self, key: str) -> TokenValue:
        return self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __hash__(self) -> int:
        return hash(self.fingerprint())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TokenSet):
            return self.fingerprint() == other.fingerprint()
        return super().__eq__(other)

    def __repr__(self) -> str:
        return f"TokenSet({self.to_dict()!r})"

    def get_path(self, path: str, default: object = None) -> object:
        """Look up one token by dotted path.

        Args:
            path: Dotted token path such as ``colors.primary.main``.
            default: Value returned when the path does not exist.

        Returns:
            Token value or ``default``.
        """
        node: object = self
        for part in path.split(PATH_SEPARATOR):
            if not isinstance(node, TokenSet):
                return default
            node = node._data.get(part, _MISSING)
            if node is _MISSING:
                return default
        return node

    def has_path(self, path: str) -> bool:
        """Return whether a dotted path exists.

        Args:
            path: Dotted token path.

        Returns:
            True when the path resolves to a value or a nested set.
        """
        return self.get_path(path, _MISSING) is not _MISSING

    def paths(self) -> tuple[str, ...]:
        """Return every leaf token path in sorted order.

        Sequences count as single leaves. Empty nested sets are reported as
        leaves so that composition can never silently lose them.

        Returns:
            Sorted dotted leaf paths.
        """
        return tuple(sorted(_iter_leaf_paths(self, "")))

    def to_dict(self) -> dict[str, object]:
        """Return a plain, mutable copy of this token set.

        Returns:
            Nested dict with tuples converted back to lists.
        """
        return {key: _thaw(value) for key, value in self._data.items()}

    def fingerprint(self) -> str:
        """Return a stable content hash independent of key order.

        Returns:
            Hex-encoded sha256 of the canonical JSON form.
        """
        if self._fingerprint is None:
            self._fingerprint = hash_payload(self.to_dict())
        return self._fingerprint


def _validate_key(key: object, parent: str) -> str:
    if not isinstance(key, str) or not key:
        raise InvalidTokenSetError(
            f"Token names must be non-empty strings (at '{parent or '<root>'}'): "
            f"{key!r}"
        )
    if PATH_SEPARATOR in key:
        raise InvalidTokenSetError(
            f"Token name {key!r} must not contain '{PATH_SEPARATOR}'."
        )
    return key


def _freeze(value: object, path: str) -> TokenValue:
    if isinstance(value, TokenSet):
        return value
    if isinstance(value, Mapping):
        return TokenSet(
            {
                _validate_key(key, path): _freeze(child, f"{path}.{key}")
                for key, child in value.items()
            }
        )
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidTokenSetError(f"Token at '{path}' must be a finite number.")
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return tuple(
            _freeze(item, f"{path}[{index}]") for index, item in enumerate(value)
        )
    raise InvalidTokenSetError(
        f"Unsupported token value at '{path}': {type(value).__name__}"
    )


def _thaw(value: TokenValue) -> object:
    if isinstance(value, TokenSet):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


def _iter_leaf_paths(tokens: TokenSet, prefix: str) -> Iterator[str]:
    for key, value in tokens.items():
        path = f"{prefix}{PATH_SEPARATOR}{key}" if prefix else key
        if isinstance(value, TokenSet) and len(value):
            yield from _iter_leaf_paths(value, path)
        else:
            yield path
