"""OpenCV DNN execution of YOLO-pose models."""

from __future__ import annotations

import cv2
import numpy as np

from .base import PoseBackend


class OpenCvPoseBackend(PoseBackend):
    """Runs an ONNX pose model through ``cv2.dnn`` on the CPU."""

    name = "opencv"

    def __init__(self, model_path: str) -> None:
        super().__init__(model_path)
        self.net = None

    @property
    def is_loaded(self) -> bool:
        return self.net is not None

    def load(self) -> None:
        net = cv2.dnn.readNetFromONNX(self.model_path)
        if net.empty():
            raise RuntimeError(f"OpenCV could not parse {self.model_path}")

        net.setPreferableBackend(cv2.dnn.DNN_BACKEND_OPENCV)
        net.setPreferableTarget(cv2.dnn.DNN_TARGET_CPU)
        self.net = net

    def run(self, tensor: np.ndarray) -> np.ndarray:
        if self.net is None:
            raise RuntimeError("OpenCV network is not loaded")

        self.net.setInput(tensor)
        return np.asarray(self.net.forward())

    def close(self) -> None:
        self.net = None
