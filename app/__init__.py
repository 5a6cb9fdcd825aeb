"""Application entry points for the head tracker."""

from .cli import TrackerDisplay, main

__all__ = ["TrackerDisplay", "main"]
