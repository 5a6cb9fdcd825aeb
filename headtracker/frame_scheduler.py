"""Tick throttling and tracker lifecycle state."""

from __future__ import annotations

from typing import Optional

from .errors import ConfigError, StateTransitionError
from .types import TrackerState

DEFAULT_FRAME_SKIP = 2

_ALLOWED_TRANSITIONS = {
    TrackerState.UNINITIALIZED: {TrackerState.READY, TrackerState.DEGRADED, TrackerState.SHUTDOWN},
    TrackerState.READY: {TrackerState.RUNNING, TrackerState.DEGRADED, TrackerState.SHUTDOWN},
    TrackerState.RUNNING: {TrackerState.DEGRADED, TrackerState.SHUTDOWN},
    TrackerState.DEGRADED: {TrackerState.SHUTDOWN},
    TrackerState.SHUTDOWN: set(),
}


class FrameScheduler:
    """Run the pipeline on every ``skip_factor``-th tick.

    The scheduler also owns the tracker state machine:
    ``UNINITIALIZED -> READY -> RUNNING``, with ``DEGRADED`` entered when the
    model or camera is missing and ``SHUTDOWN`` as the terminal state.
    Only ``READY`` and ``RUNNING`` ever let a tick through.
    """

    def __init__(self, skip_factor: int = DEFAULT_FRAME_SKIP) -> None:
        skip_factor = int(skip_factor)
        if skip_factor < 1:
            raise ConfigError(f"frame skip factor must be >= 1, got {skip_factor}")

        self.skip_factor = skip_factor
        self.ticks = 0
        self.runs = 0
        self._state = TrackerState.UNINITIALIZED
        self.degraded_reason: Optional[str] = None

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state in (TrackerState.READY, TrackerState.RUNNING)

    def should_run(self) -> bool:
        self.ticks += 1
        if self.ticks % self.skip_factor != 0:
            return False
        self.runs += 1
        return True

    def tick(self) -> bool:
        """Advance one host update. Returns ``True`` if the pipeline should run."""
        if not self.is_active:
            return False
        if not self.should_run():
            return False
        if self._state is TrackerState.READY:
            self._transition(TrackerState.RUNNING)
        return True

    def mark_ready(self) -> None:
        self._transition(TrackerState.READY)

    def mark_degraded(self, reason: str) -> None:
        if self._state is TrackerState.DEGRADED:
            return
        self._transition(TrackerState.DEGRADED)
        self.degraded_reason = reason

    def shutdown(self) -> None:
        if self._state is TrackerState.SHUTDOWN:
            return
        self._transition(TrackerState.SHUTDOWN)

    def _transition(self, target: TrackerState) -> None:
        if target not in _ALLOWED_TRANSITIONS[self._state]:
            raise StateTransitionError(
                f"cannot move from {self._state.value} to {target.value}"
            )
        self._state = target
