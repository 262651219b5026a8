"""Order-independent content hashing for token payloads."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping


def canonical_json_bytes(payload: Mapping[str, object]) -> bytes:
    """Encode a thawed token payload as canonical JSON.

    Keys are sorted and whitespace is stripped, so two payloads with the same
    content encode identically whatever their insertion order.

    Args:
        payload: Plain nested token payload.

    Returns:
        UTF-8 encoded JSON.

    Raises:
        ValueError: If a float token is NaN or infinite.
    """
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def hash_payload(payload: Mapping[str, object]) -> str:
    """Return the hex sha256 of a payload's canonical JSON form."""
    return hashlib.sha256(canonical_json_bytes(payload)).hexdigest()
