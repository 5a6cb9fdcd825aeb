"""ONNX Runtime execution of YOLO-pose models."""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np

from .base import PoseBackend

try:
    import onnxruntime as ort
    ONNX_AVAILABLE = True
except ImportError:
    ONNX_AVAILABLE = False
    print("Warning: onnxruntime not installed. Install with: pip install onnxruntime")

DEFAULT_PROVIDERS = ("CPUExecutionProvider",)


class OnnxPoseBackend(PoseBackend):
    """Thin wrapper around ``onnxruntime.InferenceSession``."""

    name = "onnxruntime"

    def __init__(
        self,
        model_path: str,
        *,
        input_name: Optional[str] = None,
        providers: Optional[Sequence[str]] = None,
    ) -> None:
        super().__init__(model_path)
        self.input_name = input_name
        self.output_name: Optional[str] = None
        self.providers: List[str] = list(providers or DEFAULT_PROVIDERS)
        self.session = None

    @property
    def is_loaded(self) -> bool:
        return self.session is not None

    def load(self) -> None:
        if not ONNX_AVAILABLE:
            raise RuntimeError("onnxruntime is not installed. Install with: pip install onnxruntime")

        available = set(ort.get_available_providers())
        providers = [p for p in self.providers if p in available] or list(DEFAULT_PROVIDERS)

        session = ort.InferenceSession(self.model_path, providers=providers)
        inputs = session.get_inputs()
        if not inputs:
            raise RuntimeError(f"Model {self.model_path} declares no inputs")

        self.session = session
        if self.input_name is None:
            self.input_name = inputs[0].name
        self.output_name = session.get_outputs()[0].name

        print(f"   Input: {self.input_name} {inputs[0].shape}")
        print(f"   Output: {self.output_name} {session.get_outputs()[0].shape}")
        print(f"   Providers: {', '.join(session.get_providers())}")

    def run(self, tensor: np.ndarray) -> np.ndarray:
        if self.session is None:
            raise RuntimeError("ONNX session is not loaded")

        outputs = self.session.run([self.output_name], {self.input_name: tensor})
        return np.asarray(outputs[0])

    def close(self) -> None:
        self.session = None
