#!/usr/bin/env python3
"""
Head Tracker
Per-tick nose tracking: camera frame -> pose model -> normalized nose X

The tracker is driven by one external ``tick()`` per host update and never
raises out of it. Startup problems put it in the degraded state, where the
tracked position simply stays where it was.
"""

import sys
from typing import Any, Dict, Optional, Union

from .camera import CameraSource
from .config_manager import ConfigManager
from .errors import ConfigError, StartupFailure
from .frame_normalizer import FrameNormalizer
from .frame_scheduler import FrameScheduler
from .inference import PoseInferenceAdapter
from .keypoint_extractor import KeypointExtractor
from .tracked_position import TrackedPosition
from .types import Frame, NoseDetection, TrackerState


class HeadTracker:
    """Owns the camera, the pose model and the tracked nose position."""

    def __init__(
        self,
        config: Union[ConfigManager, Dict[str, Any], None] = None,
        *,
        camera: Optional[CameraSource] = None,
        adapter: Optional[PoseInferenceAdapter] = None,
    ) -> None:
        if isinstance(config, ConfigManager):
            self.config = config
        else:
            self.config = ConfigManager(overrides=config, load_file=False)

        errors = self.config.validation_errors()
        if errors:
            raise ConfigError("; ".join(errors))

        cfg = self.config
        input_width = cfg.get("model.input_width")
        input_height = cfg.get("model.input_height")

        self.normalizer = FrameNormalizer(
            input_width=input_width,
            input_height=input_height,
            flip_horizontal=cfg.get("preprocessing.flip_horizontal", False),
            interpolation=cfg.get("preprocessing.interpolation", "linear"),
        )
        self.extractor = KeypointExtractor(
            input_width=input_width,
            input_height=input_height,
            confidence_threshold=cfg.get("tracking.confidence_threshold"),
            mirror_output=cfg.get("tracking.mirror_output", True),
        )
        self.scheduler = FrameScheduler(cfg.get("tracking.frame_skip"))
        self.position = TrackedPosition(cfg.get("tracking.initial_position"))

        self.adapter = adapter or PoseInferenceAdapter(
            cfg.get("model.path"),
            backend=cfg.get("model.backend", "onnxruntime"),
            input_name=cfg.get("model.input_name"),
            providers=cfg.get("model.providers"),
        )
        self.camera = camera or CameraSource(
            cfg.get("camera.source", 0),
            width=cfg.get("camera.width"),
            height=cfg.get("camera.height"),
            channel_order=cfg.get("preprocessing.source_channel_order", "BGR"),
        )

        self.startup_error: Optional[StartupFailure] = None
        self.last_frame: Optional[Frame] = None
        self.last_detection: Optional[NoseDetection] = None
        self.missed_frames = 0
        self.unusable_frames = 0
        self._tick_error_logged = False

    # ------------------------------------------------------------------
    # Consumer interface
    # ------------------------------------------------------------------

    @property
    def nose_position_x(self) -> float:
        return self.position.value

    @property
    def state(self) -> TrackerState:
        return self.scheduler.state

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> TrackerState:
        """Acquire the model and the camera.

        Failures are reported once and leave the tracker ``DEGRADED``; the
        first one is kept on ``startup_error``.
        """
        if self.state is not TrackerState.UNINITIALIZED:
            return self.state

        for acquire in (self.adapter.load, self.camera.activate):
            try:
                acquire()
            except StartupFailure as exc:
                print(f"❌ {exc}", file=sys.stderr)
                if self.startup_error is None:
                    self.startup_error = exc

        if self.startup_error is not None:
            self.scheduler.mark_degraded(str(self.startup_error))
            print(
                f"⚠️  Head tracker degraded, holding position at {self.nose_position_x:.3f}",
                file=sys.stderr,
            )
        else:
            self.scheduler.mark_ready()
            print("✅ Head tracker ready")

        return self.state

    def shutdown(self) -> None:
        """Release the pose model and the camera. Safe to call repeatedly."""
        if self.state is TrackerState.SHUTDOWN:
            return
        self.adapter.close()
        self.camera.deactivate()
        self.scheduler.shutdown()
        self.last_frame = None
        print("Head tracker stopped")

    def __enter__(self) -> "HeadTracker":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    # ------------------------------------------------------------------
    # Per-tick processing
    # ------------------------------------------------------------------

    def tick(self) -> bool:
        """Run one host update. Returns ``True`` when a new position was accepted."""
        if self.state is TrackerState.SHUTDOWN:
            return False

        try:
            accepted = self._run_tick()
        except Exception as exc:  # per-tick boundary, position is held
            if not self._tick_error_logged:
                print(f"⚠️  Tick failed, holding last position: {exc}", file=sys.stderr)
                self._tick_error_logged = True
            return False

        if self._tick_error_logged:
            print("✅ Tick recovered")
            self._tick_error_logged = False
        return accepted

    def _run_tick(self) -> bool:
        self.last_frame = self.camera.read_frame()
        if not self.scheduler.tick():
            return False

        if self.last_frame is None:
            self.missed_frames += 1
            return False

        return self.process_frame(self.last_frame)

    def process_frame(self, frame: Frame) -> bool:
        """Normalize, infer and extract for one frame."""
        if not self.normalizer.has_usable_data(frame):
            self.unusable_frames += 1
            return False

        tensor = self.normalizer.normalize(frame)
        result = self.adapter.infer(tensor)
        detection = self.extractor.update(result, self.position)
        self.last_detection = detection
        return detection is not None

    def stats(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "position": round(self.nose_position_x, 4),
            "ticks": self.scheduler.ticks,
            "runs": self.scheduler.runs,
            "missed_frames": self.missed_frames,
            "unusable_frames": self.unusable_frames,
            "inference_failures": self.adapter.failure_count,
        }
