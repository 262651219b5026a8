"""Onboarding flow error contracts."""

from __future__ import annotations


class OnboardingError(RuntimeError):
    """Base error for onboarding flow misuse."""


class OnboardingTransitionError(OnboardingError):
    """Raised when an event is not valid for the current phase."""


class OnboardingBusyError(OnboardingError):
    """Raised when an event arrives while another is still being processed."""
