"""Exception types raised by the head tracking pipeline."""

from __future__ import annotations


class HeadTrackerError(Exception):
    """Base class for head tracker errors."""


class StartupFailure(HeadTrackerError):
    """A resource needed for tracking could not be acquired at startup."""


class ModelLoadError(StartupFailure):
    """The pose model file is missing, unreadable or the backend is unavailable."""


class CameraUnavailableError(StartupFailure):
    """No camera feed could be opened."""


class StateTransitionError(HeadTrackerError):
    """An illegal tracker state transition was requested."""


class ConfigError(HeadTrackerError):
    """A configuration value is out of range."""
