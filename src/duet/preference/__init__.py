"""Persona preference persistence."""

from duet.preference.store import (
    PREFERENCE_SCHEMA_VERSION,
    FilePreferenceStore,
    InMemoryPreferenceStore,
    PreferenceStore,
    PreferenceStoreError,
    PreferenceWriteError,
    StoredPreference,
)

__all__ = [
    "PREFERENCE_SCHEMA_VERSION",
    "FilePreferenceStore",
    "InMemoryPreferenceStore",
    "PreferenceStore",
    "PreferenceStoreError",
    "PreferenceWriteError",
    "StoredPreference",
]
