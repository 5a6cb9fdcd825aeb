"""Pose model backends and the per-tick inference adapter."""

from .adapter import BACKENDS, PoseInferenceAdapter, create_backend
from .base import PoseBackend
from .onnx_backend import ONNX_AVAILABLE, OnnxPoseBackend
from .opencv_backend import OpenCvPoseBackend

__all__ = [
    "BACKENDS",
    "ONNX_AVAILABLE",
    "OnnxPoseBackend",
    "OpenCvPoseBackend",
    "PoseBackend",
    "PoseInferenceAdapter",
    "create_backend",
]
