"""Onboarding state machine for the one-time persona choice."""

from duet.onboarding.errors import (
    OnboardingBusyError,
    OnboardingError,
    OnboardingTransitionError,
)
from duet.onboarding.flow import NavigationHandler, OnboardingFlow
from duet.onboarding.models import (
    Back,
    Confirm,
    NavigationSignal,
    OnboardingEvent,
    OnboardingPhase,
    OnboardingState,
    Select,
    parse_event,
)

__all__ = [
    "Back",
    "Confirm",
    "NavigationHandler",
    "NavigationSignal",
    "OnboardingBusyError",
    "OnboardingError",
    "OnboardingEvent",
    "OnboardingFlow",
    "OnboardingPhase",
    "OnboardingState",
    "OnboardingTransitionError",
    "Select",
    "parse_event",
]
