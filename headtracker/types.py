"""Shared data structures for the nose tracking pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

import numpy as np

CHANNEL_ORDERS = ("BGR", "RGB", "BGRA", "RGBA")


def match_channel_order(channel_order: str, channels: int) -> str:
    """Add or drop the alpha suffix so ``channel_order`` covers ``channels``.

    The configured order only names the color layout; whether the buffer
    carries alpha comes from the image itself.
    """
    base = channel_order[:3]
    if channels == 4:
        return base + "A"
    if channels == 3:
        return base
    return channel_order


class TrackerState(Enum):
    """Lifecycle states of the tracker."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"
    RUNNING = "running"
    DEGRADED = "degraded"
    SHUTDOWN = "shutdown"


@dataclass(frozen=True)
class Frame:
    """A single camera image with an explicit pixel layout.

    ``data`` is either an ``H x W x C`` uint8 array or the raw interleaved
    bytes of one. ``width``/``height``/``channels`` describe what the camera
    claims the buffer holds; the normalizer checks the two agree.
    """

    data: Union[np.ndarray, bytes, None]
    width: int
    height: int
    channels: int = 3
    channel_order: str = "BGR"

    @classmethod
    def from_array(cls, image: Optional[np.ndarray], channel_order: str = "BGR") -> "Frame":
        if image is None or image.size == 0:
            return cls(data=None, width=0, height=0, channels=len(channel_order), channel_order=channel_order)

        height, width = image.shape[:2]
        channels = int(image.shape[2]) if image.ndim == 3 else 1
        return cls(
            data=image,
            width=int(width),
            height=int(height),
            channels=channels,
            channel_order=match_channel_order(channel_order, channels),
        )

    @property
    def byte_count(self) -> int:
        if self.data is None:
            return 0
        if isinstance(self.data, np.ndarray):
            return int(self.data.size)
        return len(self.data)

    @property
    def is_empty(self) -> bool:
        return self.byte_count == 0 or self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class InferenceResult:
    """Outcome of one forward pass.

    ``output`` holds the raw ``[1, attribute, anchor]`` tensor when the pass
    succeeded; otherwise it is ``None`` and ``error`` says why.
    """

    output: Optional[np.ndarray] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.output is not None

    @classmethod
    def no_result(cls, reason: str) -> "InferenceResult":
        return cls(output=None, error=reason)


@dataclass(frozen=True)
class NoseDetection:
    """Nose keypoint of the most confident detection, normalized to [0, 1]."""

    anchor: int
    score: float
    x: float
    y: float
