"""Static checks for content payloads before they ship."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

from duet.content.resolver import ContentNode, ContentResolver


class ContentIssueKind(StrEnum):
    """Stable content authoring defect kinds."""

    MALFORMED_VARIANT = "malformed_variant"
    EMPTY_VARIANT = "empty_variant"


class ContentIssue(BaseModel):
    """One authoring defect found in a content tree."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ContentIssueKind
    location: str
    message: str
    declared_keys: tuple[str, ...] = ()


def validate_content(
    node: ContentNode,
    resolver: ContentResolver | None = None,
) -> tuple[ContentIssue, ...]:
    """Report variant nodes that would need a fallback or carry blank copy.

    Args:
        node: Content tree.
        resolver: Resolver whose variant-key vocabulary applies; defaults to a
            resolver with default settings.

    Returns:
        Issues in depth-first document order.
    """
    effective = resolver or ContentResolver()
    return tuple(_walk(node, effective, ""))


def _walk(
    node: object, resolver: ContentResolver, location: str
) -> Iterator[ContentIssue]:
    if isinstance(node, Mapping):
        if resolver.is_variant_node(node):
            yield from _check_variant(node, resolver, location)
        for key, child in node.items():
            yield from _walk(child, resolver, _child_location(location, key))
        return
    if isinstance(node, Sequence) and not isinstance(node, (str, bytes, bytearray)):
        for index, child in enumerate(node):
            yield from _walk(child, resolver, f"{location}[{index}]")


def _check_variant(
    node: Mapping[str, object], resolver: ContentResolver, location: str
) -> Iterator[ContentIssue]:
    declared = tuple(sorted(node.keys()))
    display = location or "<root>"
    if not resolver.is_well_formed(node):
        yield ContentIssue(
            kind=ContentIssueKind.MALFORMED_VARIANT,
            location=display,
            message=(
                f"Variant node must declare '{resolver.default_key}' or every "
                "persona."
            ),
            declared_keys=declared,
        )
    for key, value in node.items():
        if value is None or (isinstance(value, str) and not value.strip()):
            yield ContentIssue(
                kind=ContentIssueKind.EMPTY_VARIANT,
                location=_child_location(location, key),
                message=f"Variant '{key}' is empty.",
                declared_keys=declared,
            )


def _child_location(location: str, key: object) -> str:
    return f"{location}.{key}" if location else str(key)
