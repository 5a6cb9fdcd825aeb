"""Shared fixtures for head tracker tests."""

from __future__ import annotations

from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
import pytest

from headtracker.camera import CameraSource
from headtracker.errors import CameraUnavailableError
from headtracker.inference import PoseBackend
from headtracker.types import Frame

# YOLO11n-pose: 4 box + 1 score + 17 keypoints * 3
POSE_ATTRIBUTES = 56


def make_output(anchors: Sequence[Tuple[float, float, float]], attributes: int = POSE_ATTRIBUTES) -> np.ndarray:
    """Build a ``[1, attribute, anchor]`` tensor from ``(score, nose_x, nose_y)`` triples."""
    output = np.zeros((1, attributes, len(anchors)), dtype=np.float32)
    for i, (score, nose_x, nose_y) in enumerate(anchors):
        output[0, 4, i] = score
        output[0, 5, i] = nose_x
        output[0, 6, i] = nose_y
    return output


def solid_frame(color: Tuple[int, ...], width: int = 64, height: int = 48, channel_order: str = "BGR") -> Frame:
    image = np.zeros((height, width, len(color)), dtype=np.uint8)
    image[:, :] = color
    return Frame.from_array(image, channel_order=channel_order)


class FakeBackend(PoseBackend):
    """In-memory pose backend returning scripted outputs.

    Each entry in ``outputs`` is either an array to return or an exception
    to raise; the last entry repeats once the script runs out.
    """

    name = "fake"

    def __init__(
        self,
        outputs: Iterable[Union[np.ndarray, Exception, None]] = (),
        *,
        load_error: Optional[Exception] = None,
    ) -> None:
        super().__init__("fake.onnx")
        self.outputs: List[Union[np.ndarray, Exception, None]] = list(outputs)
        self.load_error = load_error
        self.loaded = False
        self.calls: List[np.ndarray] = []
        self.close_calls = 0

    @property
    def is_loaded(self) -> bool:
        return self.loaded

    def load(self) -> None:
        if self.load_error is not None:
            raise self.load_error
        self.loaded = True

    def run(self, tensor: np.ndarray) -> np.ndarray:
        self.calls.append(tensor)
        if not self.outputs:
            return make_output([])
        index = min(len(self.calls), len(self.outputs)) - 1
        item = self.outputs[index]
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        self.close_calls += 1
        self.loaded = False


class FakeCamera(CameraSource):
    """Camera source serving frames from a list or a factory."""

    def __init__(
        self,
        frames: Optional[Sequence[Optional[Frame]]] = None,
        *,
        factory: Optional[Callable[[int], Optional[Frame]]] = None,
        available: bool = True,
    ) -> None:
        super().__init__(0)
        self.frames = list(frames) if frames is not None else None
        self.factory = factory
        self.available = available
        self.active = False
        self.reads = 0
        self.deactivations = 0

    @property
    def is_active(self) -> bool:
        return self.active

    def activate(self) -> None:
        if not self.available:
            raise CameraUnavailableError("Could not open input source: fake")
        self.active = True

    def read_frame(self) -> Optional[Frame]:
        if not self.active:
            return None
        self.reads += 1
        if self.factory is not None:
            return self.factory(self.reads)
        if not self.frames:
            return None
        return self.frames[min(self.reads, len(self.frames)) - 1]

    def deactivate(self) -> None:
        if self.active:
            self.deactivations += 1
        self.active = False


@pytest.fixture
def model_file(tmp_path):
    path = tmp_path / "pose.onnx"
    path.write_bytes(b"not-a-real-model")
    return str(path)


@pytest.fixture
def camera_frame():
    return solid_frame((40, 80, 120), width=160, height=120)


@pytest.fixture
def fake_camera(camera_frame):
    return FakeCamera(factory=lambda _: camera_frame)
