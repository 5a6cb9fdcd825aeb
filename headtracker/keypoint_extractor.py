"""Nose keypoint extraction from YOLO-pose style output tensors."""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from .frame_normalizer import DEFAULT_INPUT_HEIGHT, DEFAULT_INPUT_WIDTH
from .tracked_position import TrackedPosition
from .types import InferenceResult, NoseDetection

# Attribute rows of the [1, attribute, anchor] output: 0-3 box, 4 score,
# then (x, y, visibility) triplets per keypoint starting with the nose.
CONFIDENCE_INDEX = 4
NOSE_X_INDEX = 5
NOSE_Y_INDEX = 6

DEFAULT_CONFIDENCE_THRESHOLD = 0.4

ModelOutput = Union[np.ndarray, InferenceResult, None]


class KeypointExtractor:
    """Pick the most confident detection and turn its nose into a control value."""

    def __init__(
        self,
        *,
        input_width: int = DEFAULT_INPUT_WIDTH,
        input_height: int = DEFAULT_INPUT_HEIGHT,
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
        mirror_output: bool = True,
    ) -> None:
        if input_width <= 0 or input_height <= 0:
            raise ValueError(f"Model input size must be positive, got {input_width}x{input_height}")

        self.input_width = int(input_width)
        self.input_height = int(input_height)
        self.confidence_threshold = float(confidence_threshold)
        self.mirror_output = bool(mirror_output)

    def find_best_detection(self, output: ModelOutput) -> Optional[NoseDetection]:
        """Return the nose of the highest scoring anchor, or ``None``.

        Ties go to the first anchor. The winning score must be strictly
        above ``confidence_threshold``.
        """
        tensor = self._as_tensor(output)
        if tensor is None:
            return None

        scores = tensor[0, CONFIDENCE_INDEX, :]
        if scores.size == 0:
            return None
        scores = np.where(np.isfinite(scores), scores, -np.inf)

        best = int(np.argmax(scores))
        # Compare at tensor precision; a float32 score equal to the threshold is held.
        threshold = scores.dtype.type(self.confidence_threshold)
        if not scores[best] > threshold:
            return None
        best_score = float(scores[best])

        nose_x = float(tensor[0, NOSE_X_INDEX, best])
        nose_y = float(tensor[0, NOSE_Y_INDEX, best])
        if not (np.isfinite(nose_x) and np.isfinite(nose_y)):
            return None

        x = self._clamp(nose_x / self.input_width)
        if self.mirror_output:
            x = 1.0 - x
        y = self._clamp(nose_y / self.input_height)
        return NoseDetection(anchor=best, score=best_score, x=x, y=y)

    def extract(self, output: ModelOutput, previous: float) -> float:
        """Return the new tracked X, or ``previous`` unchanged when nothing qualifies."""
        detection = self.find_best_detection(output)
        if detection is None:
            return previous
        return detection.x

    def update(self, output: ModelOutput, position: TrackedPosition) -> Optional[NoseDetection]:
        """Write the accepted nose X into ``position``; hold it otherwise."""
        detection = self.find_best_detection(output)
        if detection is None:
            return None
        position.set(detection.x)
        return detection

    @staticmethod
    def _as_tensor(output: ModelOutput) -> Optional[np.ndarray]:
        if isinstance(output, InferenceResult):
            output = output.output
        if output is None:
            return None

        tensor = np.asarray(output)
        if tensor.ndim != 3 or tensor.shape[0] < 1 or tensor.shape[1] <= NOSE_Y_INDEX:
            return None
        return tensor

    @staticmethod
    def _clamp(value: float) -> float:
        return min(max(value, 0.0), 1.0)
