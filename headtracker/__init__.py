#!/usr/bin/env python3
"""
Python Head Tracker
Nose position tracking from a live camera with a YOLO-pose model
"""

from .camera import CameraSource
from .config_manager import ConfigManager
from .errors import (
    CameraUnavailableError,
    ConfigError,
    HeadTrackerError,
    ModelLoadError,
    StartupFailure,
    StateTransitionError,
)
from .frame_normalizer import FrameNormalizer
from .frame_scheduler import FrameScheduler
from .head_tracker import HeadTracker
from .inference import PoseInferenceAdapter
from .keypoint_extractor import KeypointExtractor
from .tracked_position import TrackedPosition
from .types import Frame, InferenceResult, NoseDetection, TrackerState

__version__ = "1.0.0"

__all__ = [
    'CameraSource',
    'CameraUnavailableError',
    'ConfigError',
    'ConfigManager',
    'Frame',
    'FrameNormalizer',
    'FrameScheduler',
    'HeadTracker',
    'HeadTrackerError',
    'InferenceResult',
    'KeypointExtractor',
    'ModelLoadError',
    'NoseDetection',
    'PoseInferenceAdapter',
    'StartupFailure',
    'StateTransitionError',
    'TrackedPosition',
    'TrackerState',
]
