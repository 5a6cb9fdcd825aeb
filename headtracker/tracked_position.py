"""Process-wide tracked nose position shared with consumers."""

from __future__ import annotations

import math
import threading

CENTER = 0.5


class TrackedPosition:
    """Normalized nose X coordinate, always within ``[0, 1]``.

    Written from the tracking tick only; ``value`` may be read from any
    thread.
    """

    def __init__(self, initial: float = CENTER) -> None:
        self._value = self._clamp(initial) if math.isfinite(initial) else CENTER
        self._lock = threading.Lock()

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def get(self) -> float:
        return self.value

    def set(self, value: float) -> bool:
        """Store ``value`` clamped to ``[0, 1]``. Non-finite values are ignored."""
        value = float(value)
        if not math.isfinite(value):
            return False
        with self._lock:
            self._value = self._clamp(value)
        return True

    @staticmethod
    def _clamp(value: float) -> float:
        return min(max(float(value), 0.0), 1.0)

    def __repr__(self) -> str:
        return f"TrackedPosition({self.value:.4f})"
