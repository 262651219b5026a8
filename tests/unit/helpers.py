"""Shared test doubles for unit tests."""

from __future__ import annotations

from duet.persona import PersonaKey
from duet.preference import InMemoryPreferenceStore, PreferenceWriteError


class RecordingPreferenceStore(InMemoryPreferenceStore):
    """In-memory store that records every save call."""

    def __init__(self, initial: PersonaKey | None = None) -> None:
        super().__init__(initial)
        self.save_calls: list[PersonaKey] = []

    def save(self, persona: PersonaKey) -> None:
        self.save_calls.append(persona)
        super().save(persona)


class FailingPreferenceStore(RecordingPreferenceStore):
    """Recording store whose writes fail until ``fail_writes`` is cleared."""

    def __init__(self, initial: PersonaKey | None = None) -> None:
        super().__init__(initial)
        self.fail_writes = True

    def save(self, persona: PersonaKey) -> None:
        if self.fail_writes:
            self.save_calls.append(persona)
            raise PreferenceWriteError("disk full")
        super().save(persona)
