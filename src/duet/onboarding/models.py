"""Onboarding state, event and signal models."""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from duet.persona import PersonaKey


class OnboardingPhase(StrEnum):
    """Onboarding flow phases."""

    CHECKING = "checking"
    SELECTION = "selection"
    PREVIEW = "preview"
    COMMITTED = "committed"


class NavigationSignal(StrEnum):
    """Signal emitted when the flow commits."""

    SKIP = "skip"
    PROCEED = "proceed"


class OnboardingState(BaseModel):
    """Immutable snapshot of one onboarding flow."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    phase: OnboardingPhase
    persona: PersonaKey | None = None
    error: str | None = None
    signal: NavigationSignal | None = None

    @model_validator(mode="after")
    def _validate_phase_fields(self) -> OnboardingState:
        """Validate which fields each phase may carry.

        Returns:
            Validated state.

        Raises:
            ValueError: If a field is set for a phase that cannot carry it.
        """
        needs_persona = self.phase in {
            OnboardingPhase.PREVIEW,
            OnboardingPhase.COMMITTED,
        }
        if needs_persona and self.persona is None:
            raise ValueError(f"{self.phase.value} state requires a persona.")
        if not needs_persona and self.persona is not None:
            raise ValueError(f"{self.phase.value} state must not carry a persona.")
        if self.error is not None and self.phase != OnboardingPhase.PREVIEW:
            raise ValueError("Only preview state may carry a recoverable error.")
        if (self.signal is not None) != (self.phase == OnboardingPhase.COMMITTED):
            raise ValueError("Signal is set exactly when the flow is committed.")
        return self

    @property
    def is_interactive(self) -> bool:
        """Whether the state waits for user input."""
        return self.phase in {OnboardingPhase.SELECTION, OnboardingPhase.PREVIEW}

    @property
    def is_terminal(self) -> bool:
        """Whether the flow has committed a persona."""
        return self.phase == OnboardingPhase.COMMITTED

    @classmethod
    def checking(cls) -> OnboardingState:
        return cls(phase=OnboardingPhase.CHECKING)

    @classmethod
    def selection(cls) -> OnboardingState:
        return cls(phase=OnboardingPhase.SELECTION)

    @classmethod
    def preview(
        cls, persona: PersonaKey, *, error: str | None = None
    ) -> OnboardingState:
        return cls(phase=OnboardingPhase.PREVIEW, persona=persona, error=error)

    @classmethod
    def committed(
        cls, persona: PersonaKey, *, signal: NavigationSignal
    ) -> OnboardingState:
        return cls(phase=OnboardingPhase.COMMITTED, persona=persona, signal=signal)


class Select(BaseModel):
    """User picked one persona."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["select"] = "select"
    persona: str = Field(min_length=1)


class Confirm(BaseModel):
    """User confirmed the previewed persona."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["confirm"] = "confirm"


class Back(BaseModel):
    """User went back from the preview to the selection."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: Literal["back"] = "back"


type OnboardingEvent = Select | Confirm | Back

_EVENT_ADAPTER: TypeAdapter[Select | Confirm | Back] = TypeAdapter(
    Annotated[Select | Confirm | Back, Field(discriminator="kind")]
)


def parse_event(payload: object) -> Select | Confirm | Back:
    """Validate one event payload such as ``{"kind": "select", "persona": "male"}``.

    Args:
        payload: Decoded event payload.

    Returns:
        Typed onboarding event.

    Raises:
        pydantic.ValidationError: If the payload is not a known event.
    """
    return _EVENT_ADAPTER.validate_python(payload)
