"""Persona variant resolution: themes, content and onboarding."""
