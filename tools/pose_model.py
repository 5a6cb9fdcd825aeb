"""Utilities for inspecting and smoke-testing pose models."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Union

import cv2
import numpy as np

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from headtracker.errors import ModelLoadError
from headtracker.frame_normalizer import FrameNormalizer
from headtracker.inference import ONNX_AVAILABLE, PoseBackend, PoseInferenceAdapter
from headtracker.keypoint_extractor import CONFIDENCE_INDEX, NOSE_Y_INDEX, KeypointExtractor
from headtracker.types import Frame

if ONNX_AVAILABLE:
    import onnxruntime as ort


def inspect_model(model_path: str) -> bool:
    """Print the input/output layout of an ONNX pose model."""
    print(f"\n📋 Inspecting: {model_path}")
    if not Path(model_path).is_file():
        print(f"❌ Model not found: {model_path}")
        return False
    if not ONNX_AVAILABLE:
        print("❌ onnxruntime is required to inspect models")
        return False

    try:
        session = ort.InferenceSession(model_path, providers=["CPUExecutionProvider"])
    except Exception as exc:  # pylint: disable=broad-except
        print(f"❌ Cannot open model: {exc}")
        return False

    for tensor in session.get_inputs():
        print(f"   Input  {tensor.name}: {tensor.shape} ({tensor.type})")
    for tensor in session.get_outputs():
        print(f"   Output {tensor.name}: {tensor.shape} ({tensor.type})")

    output_shape = session.get_outputs()[0].shape
    if len(output_shape) != 3:
        print(f"⚠️  Expected a [batch, attribute, anchor] output, got {len(output_shape)} dims")
        return False

    attributes = output_shape[1]
    if isinstance(attributes, int):
        keypoints = (attributes - CONFIDENCE_INDEX - 1) // 3
        print(f"   Attributes: {attributes} (box 0-3, score {CONFIDENCE_INDEX}, {keypoints} keypoints)")
        if attributes <= NOSE_Y_INDEX:
            print("⚠️  Output has no nose keypoint slots")
            return False

    print("✅ Model layout looks like a YOLO-pose export")
    return True


def smoke_test(
    model_path: str,
    image_path: Optional[str] = None,
    *,
    backend: Union[str, PoseBackend] = "onnxruntime",
    threshold: float = 0.4,
) -> bool:
    """Run one inference and print the most confident nose detection."""
    backend_name = backend if isinstance(backend, str) else backend.name
    print(f"\n🚀 Smoke test ({backend_name}): {model_path}")

    if image_path:
        image = cv2.imread(image_path)
        if image is None:
            print(f"❌ Cannot load image: {image_path}")
            return False
    else:
        image = np.random.randint(0, 255, (480, 640, 3), dtype=np.uint8)

    adapter = PoseInferenceAdapter(model_path, backend=backend)
    try:
        adapter.load()
    except ModelLoadError as exc:
        print(f"❌ {exc}")
        return False

    normalizer = FrameNormalizer()
    extractor = KeypointExtractor(confidence_threshold=threshold, mirror_output=False)

    with adapter:
        tensor = normalizer.normalize(Frame.from_array(image))
        result = adapter.infer(tensor)

    if not result.ok:
        print(f"❌ Inference failed: {result.error}")
        return False

    print(f"   Output shape: {result.output.shape}")
    detection = extractor.find_best_detection(result)
    if detection is None:
        best = float(np.max(result.output[0, CONFIDENCE_INDEX, :]))
        print(f"   No detection above {threshold} (best score {best:.3f})")
    else:
        print(
            f"✅ Nose at x={detection.x:.3f}, y={detection.y:.3f} "
            f"(anchor {detection.anchor}, score {detection.score:.3f})"
        )
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pose model utilities")
    sub = parser.add_subparsers(dest="command", required=True)

    inspect_parser = sub.add_parser("inspect", help="Print model input/output layout")
    inspect_parser.add_argument("model", type=str, help="Path to the ONNX pose model")

    smoke_parser = sub.add_parser("smoke", help="Run one inference on an image")
    smoke_parser.add_argument("model", type=str, help="Path to the ONNX pose model")
    smoke_parser.add_argument("--image", type=str, help="Image to run on (random noise if omitted)")
    smoke_parser.add_argument("--backend", type=str, choices=["onnxruntime", "opencv"], default="onnxruntime")
    smoke_parser.add_argument("--threshold", type=float, default=0.4)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "inspect":
        ok = inspect_model(args.model)
    else:
        ok = smoke_test(args.model, args.image, backend=args.backend, threshold=args.threshold)
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
