"""Persona preference persistence."""

from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import UTC, datetime
from pathlib import Path
from threading import Lock
from typing import Protocol

from pydantic import BaseModel, ConfigDict, ValidationError

from duet.persona import PersonaKey, parse_persona_key

_LOGGER = logging.getLogger(__name__)

PREFERENCE_SCHEMA_VERSION = 1


class PreferenceStoreError(RuntimeError):
    """Base persistence error for preference store operations."""


class PreferenceWriteError(PreferenceStoreError):
    """Raised when a preference could not be durably written."""


class StoredPreference(BaseModel):
    """Persisted persona choice with its save timestamp."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    persona: PersonaKey
    saved_at: datetime


class _PersistedPreferenceV1(BaseModel):
    """Versioned on-disk preference payload."""

    model_config = ConfigDict(extra="forbid")

    schema_version: int = PREFERENCE_SCHEMA_VERSION
    persona: PersonaKey
    saved_at: datetime


class PreferenceStore(Protocol):
    """Durable single-slot persona preference storage."""

    def load(self) -> PersonaKey | None:
        """Return the stored persona, or None when absent."""

    def save(self, persona: PersonaKey) -> None:
        """Durably store one persona.

        Raises:
            PreferenceWriteError: If the write did not complete.
        """

    def clear(self) -> None:
        """Delete the stored persona.

        Raises:
            PreferenceStoreError: If the slot could not be removed.
        """


class InMemoryPreferenceStore:
    """Process-local preference store."""

    def __init__(self, initial: PersonaKey | None = None) -> None:
        self._record: StoredPreference | None = None
        self._lock = Lock()
        if initial is not None:
            self._record = StoredPreference(persona=initial, saved_at=_utc_now())

    def load(self) -> PersonaKey | None:
        record = self._record
        return record.persona if record is not None else None

    def metadata(self) -> StoredPreference | None:
        return self._record

    def save(self, persona: PersonaKey) -> None:
        parsed = _require_persona(persona)
        with self._lock:
            self._record = StoredPreference(persona=parsed, saved_at=_utc_now())

    def clear(self) -> None:
        with self._lock:
            self._record = None


class FilePreferenceStore:
    """JSON file-backed preference store.

    Writes go to a temp file in the same directory, are fsynced, then renamed
    over the slot, so ``save`` returning means the value is on disk. Corrupt
    or unreadable payloads are removed and reported as absent.
    """

    def __init__(self, path: Path) -> None:
        """Create store for one preference file.

        Args:
            path: Preference slot path.
        """
        self._path = path
        self._lock = Lock()

    @property
    def path(self) -> Path:
        """Preference slot path."""
        return self._path

    def load(self) -> PersonaKey | None:
        """Return the stored persona.

        Returns:
            Stored persona, or None when absent or unreadable.
        """
        record = self.metadata()
        return record.persona if record is not None else None

    def metadata(self) -> StoredPreference | None:
        """Return the stored preference record.

        Returns:
            Stored record, or None when absent or unreadable.
        """
        with self._lock:
            try:
                raw = self._path.read_bytes()
            except FileNotFoundError:
                return None
            except OSError as exc:
                _LOGGER.warning(
                    "preference.read_failed path=%s error=%s", self._path, exc
                )
                return None
            try:
                payload = _decode_payload(raw)
            except PreferenceStoreError as exc:
                _LOGGER.warning(
                    "preference.corrupt path=%s reason=%s; clearing slot",
                    self._path,
                    exc,
                )
                self._path.unlink(missing_ok=True)
                return None
            return StoredPreference(persona=payload.persona, saved_at=payload.saved_at)

    def save(self, persona: PersonaKey) -> None:
        """Durably write one persona.

        Args:
            persona: Persona to store.

        Raises:
            PreferenceWriteError: If the payload could not be written.
        """
        parsed = _require_persona(persona)
        payload = _PersistedPreferenceV1(persona=parsed, saved_at=_utc_now())
        with self._lock:
            try:
                _atomic_write_text(
                    self._path, payload.model_dump_json(indent=2), temp_prefix="pref"
                )
            except OSError as exc:
                raise PreferenceWriteError(
                    f"Unable to save persona preference to '{self._path}': {exc}"
                ) from exc
        _LOGGER.info("preference.saved persona=%s path=%s", parsed.value, self._path)

    def clear(self) -> None:
        """Delete the preference slot.

        Raises:
            PreferenceStoreError: If the slot exists but could not be removed.
        """
        with self._lock:
            try:
                self._path.unlink(missing_ok=True)
            except OSError as exc:
                raise PreferenceStoreError(
                    f"Unable to clear persona preference at '{self._path}': {exc}"
                ) from exc
        _LOGGER.info("preference.cleared path=%s", self._path)


def _require_persona(persona: object) -> PersonaKey:
    parsed = parse_persona_key(persona)
    if parsed is None:
        raise PreferenceWriteError(
            f"Refusing to store unrecognized persona {persona!r}."
        )
    return parsed


def _decode_payload(raw: bytes) -> _PersistedPreferenceV1:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise PreferenceStoreError(f"Invalid preference encoding: {exc}") from exc
    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PreferenceStoreError(f"Invalid preference JSON: {exc}") from exc
    if not isinstance(decoded, dict):
        raise PreferenceStoreError("Invalid preference payload: expected JSON object.")
    version = decoded.get("schema_version")
    if version != PREFERENCE_SCHEMA_VERSION:
        raise PreferenceStoreError(
            f"Unsupported preference schema version: {version!r}. "
            f"Expected {PREFERENCE_SCHEMA_VERSION}."
        )
    try:
        return _PersistedPreferenceV1.model_validate(decoded)
    except ValidationError as exc:
        raise PreferenceStoreError(f"Invalid preference payload: {exc}") from exc


def _atomic_write_text(final_path: Path, content: str, *, temp_prefix: str) -> None:
    """Replace one file with new text so readers never see a partial write.

    The temp file lives next to the target so the final rename stays on one
    filesystem.

    Args:
        final_path: Destination path.
        content: Text payload.
        temp_prefix: Prefix for the temp filename.
    """
    directory = final_path.parent
    directory.mkdir(parents=True, exist_ok=True)
    temp_path = directory / f".{temp_prefix}-{uuid.uuid4().hex[:12]}.tmp"
    try:
        with temp_path.open("w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, final_path)
        _fsync_directory(directory)
    finally:
        temp_path.unlink(missing_ok=True)


def _fsync_directory(directory: Path) -> None:
    try:
        dir_fd = os.open(directory, os.O_RDONLY)
    except OSError:
        return  # not supported on every platform
    try:
        os.fsync(dir_fd)
    except OSError:
        pass
    finally:
        os.close(dir_fd)


def _utc_now() -> datetime:
    return datetime.now(UTC)
