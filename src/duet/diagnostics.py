"""Developer-facing resolution diagnostics.

Resolution defects (a caller passing an unknown persona, content missing a
variant) are recovered with deterministic fallbacks. They are never raised;
instead each one is logged and optionally handed to a caller-provided sink.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class DiagnosticCode(StrEnum):
    """Stable diagnostic codes for recovered resolution defects."""

    UNRECOGNIZED_PERSONA_KEY = "unrecognized_persona_key"
    MISSING_VARIANT = "missing_variant"


class Diagnostic(BaseModel):
    """One recovered resolution defect."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    code: DiagnosticCode
    message: str
    persona: str | None = None
    location: str | None = None
    fallback: str | None = None


type DiagnosticSink = Callable[[Diagnostic], None]


def report(
    logger: logging.Logger,
    diagnostic: Diagnostic,
    sink: DiagnosticSink | None = None,
) -> None:
    """Log one diagnostic at WARNING level and forward it to an optional sink.

    Args:
        logger: Module logger of the reporting component.
        diagnostic: Diagnostic to emit.
        sink: Optional collector supplied by the caller.
    """
    logger.warning(
        "%s: %s (persona=%s location=%s fallback=%s)",
        diagnostic.code.value,
        diagnostic.message,
        diagnostic.persona,
        diagnostic.location or "<root>",
        diagnostic.fallback,
    )
    if sink is not None:
        sink(diagnostic)


class DiagnosticCollector:
    """List-backed sink, handy for tests and CLI reporting."""

    def __init__(self) -> None:
        self.items: list[Diagnostic] = []

    def __call__(self, diagnostic: Diagnostic) -> None:
        self.items.append(diagnostic)

    def codes(self) -> list[DiagnosticCode]:
        """Return collected diagnostic codes in emission order.

        Returns:
            Diagnostic codes.
        """
        return [item.code for item in self.items]
