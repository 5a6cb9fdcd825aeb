#!/usr/bin/env python3
"""CLI entry point for the head tracker."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

import cv2
import numpy as np

# Ensure the headtracker package is importable regardless of entry location
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from headtracker.config_manager import ConfigManager
from headtracker.errors import ConfigError
from headtracker.head_tracker import HeadTracker
from headtracker.types import TrackerState

IDLE_DELAY_S = 0.01


class TrackerDisplay:
    """Preview window showing the camera image and the tracked position."""

    def __init__(self, window_name: str = "Head Tracker") -> None:
        self.window_name = window_name
        self.fps_buffer = [0.0] * 16
        self.fps_index = 0

    def update_fps(self, fps: float) -> None:
        self.fps_buffer[self.fps_index] = fps
        self.fps_index = (self.fps_index + 1) % len(self.fps_buffer)

    def get_average_fps(self) -> float:
        return sum(self.fps_buffer) / len(self.fps_buffer)

    def render(self, tracker: HeadTracker) -> Optional[np.ndarray]:
        frame = tracker.last_frame
        if frame is None or not isinstance(frame.data, np.ndarray):
            return None

        image = frame.data.copy()
        if frame.channels == 4:
            image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
        h, w = image.shape[:2]

        # The tracked value is in control space; undo the mirror for drawing.
        x = tracker.nose_position_x
        if tracker.extractor.mirror_output:
            x = 1.0 - x
        if tracker.normalizer.flip_horizontal:
            x = 1.0 - x
        line_x = int(round(x * (w - 1)))
        color = (0, 255, 0) if tracker.last_detection is not None else (0, 165, 255)
        cv2.line(image, (line_x, 0), (line_x, h - 1), color, 2)

        detection = tracker.last_detection
        if detection is not None:
            dot_y = int(round(detection.y * (h - 1)))
            cv2.circle(image, (line_x, dot_y), 6, (0, 0, 255), -1)

        font = cv2.FONT_HERSHEY_SIMPLEX
        cv2.putText(image, f"FPS: {self.get_average_fps():.1f}", (10, 25), font, 0.7, (0, 255, 0), 2)
        cv2.putText(
            image,
            f"Nose X: {tracker.nose_position_x:.3f}",
            (10, 50),
            font,
            0.6,
            (180, 180, 0),
            1,
        )
        if tracker.state is TrackerState.DEGRADED:
            cv2.putText(image, "DEGRADED", (10, 75), font, 0.6, (0, 0, 255), 2)
        return image

    def show(self, tracker: HeadTracker) -> bool:
        """Draw one preview frame. Returns ``False`` when the user pressed ``q``."""
        image = self.render(tracker)
        if image is not None:
            cv2.imshow(self.window_name, image)
        key = cv2.waitKey(1) & 0xFF
        return key != ord("q")

    def close(self) -> None:
        cv2.destroyAllWindows()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Head Tracker - nose position from a live camera using a YOLO-pose model",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("input", type=str, nargs="?", default=None, help="Input source (webcam index or video file)")
    parser.add_argument("--config", type=str, help="Configuration file path")
    parser.add_argument("--model", type=str, help="Path to the ONNX pose model")
    parser.add_argument("--backend", type=str, choices=["onnxruntime", "opencv"], help="Inference backend")
    parser.add_argument("--threshold", type=float, help="Confidence threshold a detection must exceed")
    parser.add_argument("--frame-skip", type=int, help="Run inference every N ticks (>=1)")
    parser.add_argument("--mirror", dest="mirror_output", action="store_const", const=True, help="Mirror the output control sense (default)")
    parser.add_argument("--no-mirror", dest="mirror_output", action="store_const", const=False, help="Report the nose position unmirrored")
    parser.add_argument("--flip-input", action="store_true", help="Flip camera frames horizontally before inference")
    parser.add_argument("--preview", action="store_true", help="Show a preview window with the tracked position")
    parser.add_argument("--print-interval", type=int, help="Print the tracked position every N ticks (0 disables)")
    parser.add_argument("--max-ticks", type=int, default=0, help="Stop after N ticks (0 runs until interrupted)")
    parser.add_argument("--allow-degraded", action="store_true", help="Keep running when the model or camera is unavailable")
    parser.add_argument("--show-config", action="store_true", help="Print the effective configuration and exit")
    return parser


def build_config(args: argparse.Namespace) -> ConfigManager:
    config = ConfigManager(args.config) if args.config else ConfigManager(load_file=False)

    overrides: Dict[str, object] = {
        "camera.source": args.input,
        "model.path": args.model,
        "model.backend": args.backend,
        "tracking.confidence_threshold": args.threshold,
        "tracking.frame_skip": args.frame_skip,
        "tracking.mirror_output": args.mirror_output,
        "display.print_interval": args.print_interval,
    }
    for key, value in overrides.items():
        if value is not None:
            config.set(key, value)

    if args.flip_input:
        config.set("preprocessing.flip_horizontal", True)
    if args.preview:
        config.set("display.show_preview", True)

    source = config.get("camera.source")
    if isinstance(source, str) and source.isdigit():
        config.set("camera.source", int(source))
    return config


def run_loop(
    tracker: HeadTracker,
    display: Optional[TrackerDisplay] = None,
    *,
    print_interval: int = 0,
    max_ticks: int = 0,
) -> int:
    """Drive ``tracker`` until the input ends, ``q`` is pressed, Ctrl+C or ``max_ticks``.

    Returns the number of ticks driven, whether or not the tracker ran
    inference on them.
    """
    ticks = 0
    try:
        while True:
            start_time = time.time()
            tracker.tick()
            ticks += 1

            if tracker.last_frame is None:
                if tracker.camera.is_file and tracker.camera.is_active:
                    print("End of video file reached")
                    break
                time.sleep(IDLE_DELAY_S)

            if print_interval > 0 and ticks % print_interval == 0:
                detected = "detected" if tracker.last_detection is not None else "held"
                print(f"nose_x={tracker.nose_position_x:.4f} ({detected})", flush=True)

            if display is not None:
                end_time = time.time()
                fps = 1.0 / (end_time - start_time) if end_time > start_time else 0.0
                display.update_fps(fps)
                if not display.show(tracker):
                    break

            if max_ticks and ticks >= max_ticks:
                break
    except KeyboardInterrupt:
        print("Interrupted by user")
    return ticks


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = build_config(args)
    if args.show_config:
        config.print_config()
        return 0

    if not config.validate_config():
        return 2

    try:
        tracker = HeadTracker(config)
    except ConfigError as exc:
        print(f"❌ Invalid configuration: {exc}", file=sys.stderr)
        return 2

    state = tracker.start()
    if state is TrackerState.DEGRADED and not args.allow_degraded:
        tracker.shutdown()
        return 1

    display = None
    if config.get("display.show_preview"):
        display = TrackerDisplay(config.get("display.window_name", "Head Tracker"))

    print("Head tracker started. Press 'q' in the preview or Ctrl+C to quit.")

    ticks = 0
    try:
        ticks = run_loop(
            tracker,
            display,
            print_interval=int(config.get("display.print_interval", 0) or 0),
            max_ticks=max(0, args.max_ticks),
        )
    finally:
        if display is not None:
            display.close()
        stats = tracker.stats()
        tracker.shutdown()
        print(
            f"Ticks: {ticks}, inference runs: {stats['runs']}, "
            f"final nose_x: {stats['position']:.4f}"
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
