"""One-time persona selection flow."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from threading import Lock
from weakref import WeakKeyDictionary, WeakValueDictionary

from duet.onboarding.errors import OnboardingBusyError, OnboardingTransitionError
from duet.onboarding.models import (
    Back,
    Confirm,
    NavigationSignal,
    OnboardingEvent,
    OnboardingPhase,
    OnboardingState,
    Select,
)
from duet.persona import PersonaKey, parse_persona_key
from duet.preference import PreferenceStore, PreferenceWriteError

_LOGGER = logging.getLogger(__name__)

type NavigationHandler = Callable[[NavigationSignal, PersonaKey], None]

_registry_lock = Lock()
_path_lanes: WeakValueDictionary[str, _WriteLane] = WeakValueDictionary()
_object_lanes: WeakKeyDictionary[object, _WriteLane] = WeakKeyDictionary()


class _WriteLane:
    """Lock shared by every flow saving to one store.

    Lanes live only while a store or a running save still references them.
    """

    __slots__ = ("__weakref__", "_lock")

    def __init__(self) -> None:
        self._lock = Lock()

    def __enter__(self) -> _WriteLane:
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self._lock.release()


def _store_lane(store: PreferenceStore) -> _WriteLane:
    """Return the write lane shared by every flow targeting one store.

    File stores pointing at the same path share a lane; other stores get one
    lane per store object.

    Args:
        store: Preference store.

    Returns:
        Write lane.
    """
    path = getattr(store, "path", None)
    with _registry_lock:
        if path is not None:
            lane_id = str(path.resolve())
            lane = _path_lanes.get(lane_id)
            if lane is None:
                lane = _WriteLane()
                _path_lanes[lane_id] = lane
            return lane
        lane = _object_lanes.get(store)
        if lane is None:
            lane = _WriteLane()
            _object_lanes[store] = lane
        return lane


class OnboardingFlow:
    """State machine for the one-time persona choice.

    ``checking -> selection -> preview(p) -> committed(p)``; a stored preference
    short-circuits ``checking`` straight to ``committed``. ``committed`` is
    terminal for the instance; re-running onboarding needs a new flow.
    """

    def __init__(
        self,
        store: PreferenceStore,
        *,
        on_navigate: NavigationHandler | None = None,
    ) -> None:
        """Create flow in the ``checking`` phase.

        Args:
            store: Preference persistence.
            on_navigate: Called once with ``skip`` or ``proceed`` on commit.
        """
        self._store = store
        self._on_navigate = on_navigate
        self._state = OnboardingState.checking()
        self._lock = Lock()

    @property
    def state(self) -> OnboardingState:
        """Current flow state."""
        return self._state

    def start(self) -> OnboardingState:
        """Run the ``checking`` step against the preference store.

        Calling again after the check has run returns the current state.

        Returns:
            ``committed`` with a ``skip`` signal when a preference exists,
            otherwise ``selection``.
        """
        with self._exclusive():
            return self._check()

    def dispatch(self, event: OnboardingEvent) -> OnboardingState:
        """Apply one user event.

        Args:
            event: ``Select``, ``Confirm`` or ``Back``.

        Returns:
            State after the event.

        Raises:
            OnboardingTransitionError: If the event is invalid for the phase.
            OnboardingBusyError: If another event is still being processed.
        """
        with self._exclusive():
            state = self._check()
            match event:
                case Select(persona=raw):
                    self._state = self._on_select(state, raw)
                case Confirm():
                    self._state = self._on_confirm(state)
                case Back():
                    self._state = self._on_back(state)
                case _:
                    raise OnboardingTransitionError(
                        f"Unsupported onboarding event: {event!r}"
                    )
            _LOGGER.debug(
                "onboarding.transition event=%s from=%s to=%s",
                event.kind,
                state.phase.value,
                self._state.phase.value,
            )
            return self._state

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise OnboardingBusyError(
                "An onboarding event is already being processed."
            )
        try:
            yield
        finally:
            self._lock.release()

    def _check(self) -> OnboardingState:
        if self._state.phase != OnboardingPhase.CHECKING:
            return self._state
        stored = self._store.load()
        if stored is None:
            self._state = OnboardingState.selection()
            return self._state
        self._state = OnboardingState.committed(stored, signal=NavigationSignal.SKIP)
        self._navigate(NavigationSignal.SKIP, stored)
        return self._state

    def _on_select(self, state: OnboardingState, raw: str) -> OnboardingState:
        self._require_phase(state, OnboardingPhase.SELECTION, "select")
        persona = parse_persona_key(raw)
        if persona is None:
            raise OnboardingTransitionError(
                f"Cannot select unrecognized persona {raw!r}. "
                f"Expected one of: {', '.join(key.value for key in PersonaKey)}."
            )
        return OnboardingState.preview(persona)

    def _on_confirm(self, state: OnboardingState) -> OnboardingState:
        self._require_phase(state, OnboardingPhase.PREVIEW, "confirm")
        persona = state.persona
        if persona is None:
            raise OnboardingTransitionError("Preview state carries no persona.")
        try:
            with _store_lane(self._store):
                self._store.save(persona)
        except PreferenceWriteError as exc:
            _LOGGER.warning(
                "onboarding.save_failed persona=%s error=%s", persona.value, exc
            )
            return OnboardingState.preview(
                persona,
                error="Could not save your choice. Please try again.",
            )
        self._state = OnboardingState.committed(
            persona, signal=NavigationSignal.PROCEED
        )
        self._navigate(NavigationSignal.PROCEED, persona)
        return self._state

    def _on_back(self, state: OnboardingState) -> OnboardingState:
        self._require_phase(state, OnboardingPhase.PREVIEW, "back")
        return OnboardingState.selection()

    def _require_phase(
        self, state: OnboardingState, phase: OnboardingPhase, event: str
    ) -> None:
        if state.phase == phase:
            return
        if state.is_terminal:
            raise OnboardingTransitionError(
                f"Onboarding already committed; '{event}' is not accepted."
            )
        raise OnboardingTransitionError(
            f"Event '{event}' is not valid in phase '{state.phase.value}'."
        )

    def _navigate(self, signal: NavigationSignal, persona: PersonaKey) -> None:
        _LOGGER.info(
            "onboarding.committed persona=%s signal=%s", persona.value, signal.value
        )
        if self._on_navigate is not None:
            self._on_navigate(signal, persona)
