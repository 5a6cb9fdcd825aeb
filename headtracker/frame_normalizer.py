"""Frame preprocessing into the planar RGB tensor expected by pose models."""

from __future__ import annotations

from typing import Tuple

import cv2
import numpy as np

from .types import CHANNEL_ORDERS, Frame

DEFAULT_INPUT_WIDTH = 640
DEFAULT_INPUT_HEIGHT = 640

INTERPOLATIONS = {
    "nearest": cv2.INTER_NEAREST,
    "linear": cv2.INTER_LINEAR,
    "area": cv2.INTER_AREA,
}


class FrameNormalizer:
    """Resize a camera frame and convert it to a ``[1, 3, H, W]`` float tensor.

    Channel 0/1/2 of the output are always red/green/blue, whatever order the
    camera delivers. Values are scaled to ``[0, 1]``. Bad frames never raise;
    they produce an all-zero tensor instead.
    """

    def __init__(
        self,
        *,
        input_width: int = DEFAULT_INPUT_WIDTH,
        input_height: int = DEFAULT_INPUT_HEIGHT,
        flip_horizontal: bool = False,
        interpolation: str = "linear",
    ) -> None:
        if input_width <= 0 or input_height <= 0:
            raise ValueError(f"Model input size must be positive, got {input_width}x{input_height}")
        if interpolation not in INTERPOLATIONS:
            raise ValueError(
                f"Unknown interpolation '{interpolation}', expected one of {sorted(INTERPOLATIONS)}"
            )

        self.input_width = int(input_width)
        self.input_height = int(input_height)
        self.flip_horizontal = bool(flip_horizontal)
        self.interpolation = interpolation
        self._cv_interpolation = INTERPOLATIONS[interpolation]

    @property
    def tensor_shape(self) -> Tuple[int, int, int, int]:
        return (1, 3, self.input_height, self.input_width)

    def empty_tensor(self) -> np.ndarray:
        return np.zeros(self.tensor_shape, dtype=np.float32)

    def has_usable_data(self, frame: Frame) -> bool:
        """Return ``True`` when ``frame`` carries enough pixels to normalize."""
        if frame is None or frame.is_empty:
            return False
        if frame.channels not in (3, 4) or frame.channel_order not in CHANNEL_ORDERS:
            return False
        if len(frame.channel_order) != frame.channels:
            return False
        return frame.byte_count >= frame.width * frame.height * frame.channels

    def normalize(self, frame: Frame) -> np.ndarray:
        if not self.has_usable_data(frame):
            return self.empty_tensor()

        image = self._as_image(frame)
        resized = cv2.resize(
            image,
            (self.input_width, self.input_height),
            interpolation=self._cv_interpolation,
        )
        if resized.size < self.input_width * self.input_height * frame.channels:
            return self.empty_tensor()

        rgb = self._to_rgb(resized, frame.channel_order)
        if self.flip_horizontal:
            rgb = cv2.flip(rgb, 1)

        tensor = rgb.astype(np.float32) / 255.0
        tensor = np.transpose(tensor, (2, 0, 1))[np.newaxis, ...]
        return np.ascontiguousarray(tensor, dtype=np.float32)

    @staticmethod
    def _as_image(frame: Frame) -> np.ndarray:
        count = frame.width * frame.height * frame.channels
        if isinstance(frame.data, np.ndarray):
            flat = frame.data.reshape(-1)
        else:
            flat = np.frombuffer(frame.data, dtype=np.uint8)
        return np.ascontiguousarray(flat[:count].astype(np.uint8, copy=False)).reshape(
            frame.height, frame.width, frame.channels
        )

    @staticmethod
    def _to_rgb(image: np.ndarray, channel_order: str) -> np.ndarray:
        if channel_order == "BGR":
            return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        if channel_order == "BGRA":
            return cv2.cvtColor(image, cv2.COLOR_BGRA2RGB)
        if channel_order == "RGBA":
            return cv2.cvtColor(image, cv2.COLOR_RGBA2RGB)
        return image
