"""Persona-aware content resolution and validation."""

from duet.content.library import ContentLibrary, ContentLoadError, load_content
from duet.content.resolver import (
    DEFAULT_INACTIVE_PERSONA_KEYS,
    DEFAULT_VARIANT_KEY,
    ContentNode,
    ContentResolver,
)
from duet.content.validation import ContentIssue, ContentIssueKind, validate_content

__all__ = [
    "DEFAULT_INACTIVE_PERSONA_KEYS",
    "DEFAULT_VARIANT_KEY",
    "ContentIssue",
    "ContentIssueKind",
    "ContentLibrary",
    "ContentLoadError",
    "ContentNode",
    "ContentResolver",
    "load_content",
    "validate_content",
]
