"""Shared JSON/YAML document decoding."""

from __future__ import annotations

import json
from pathlib import Path

import yaml


def decode_mapping_file(
    path: Path,
    *,
    error_cls: type[Exception],
    label: str,
) -> dict[str, object]:
    """Decode a JSON or YAML document whose root must be a mapping.

    Files ending in ``.json`` are parsed as JSON; everything else as YAML.
    An empty document decodes to an empty mapping.

    Args:
        path: Document path.
        error_cls: Exception type raised for decode failures.
        label: Human-readable document kind used in error messages.

    Returns:
        Parsed mapping payload.

    Raises:
        Exception: ``error_cls`` when the file is unreadable, cannot be decoded,
            or its root is not a mapping.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise error_cls(f"Unable to read {label} '{path}': {exc}") from exc
    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise error_cls(f"Invalid {label} JSON: {exc}") from exc
    else:
        try:
            payload = yaml.safe_load(raw)
        except yaml.YAMLError as exc:
            raise error_cls(f"Invalid {label} YAML: {exc}") from exc
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise error_cls(f"Invalid {label} payload: root must be an object")
    return payload
