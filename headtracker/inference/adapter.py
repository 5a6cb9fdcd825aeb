"""Pose model ownership and per-tick inference with failure isolation."""

from __future__ import annotations

import os
import sys
from typing import Optional, Sequence, Union

import numpy as np

from ..errors import ModelLoadError
from ..types import InferenceResult
from .base import PoseBackend
from .onnx_backend import OnnxPoseBackend
from .opencv_backend import OpenCvPoseBackend

BACKENDS = ("onnxruntime", "opencv")


def create_backend(
    backend: str,
    model_path: str,
    *,
    input_name: Optional[str] = None,
    providers: Optional[Sequence[str]] = None,
) -> PoseBackend:
    if backend == "onnxruntime":
        return OnnxPoseBackend(model_path, input_name=input_name, providers=providers)
    if backend == "opencv":
        return OpenCvPoseBackend(model_path)
    raise ValueError(f"Unknown inference backend '{backend}', expected one of {BACKENDS}")


class PoseInferenceAdapter:
    """Owns one loaded pose model and runs a forward pass per tick.

    ``load()`` is the only method that raises. After a failed load every
    ``infer()`` call returns a no-result outcome, as does any pass the
    backend fails on.
    """

    def __init__(
        self,
        model_path: str,
        *,
        backend: Union[str, PoseBackend] = "onnxruntime",
        input_name: Optional[str] = None,
        providers: Optional[Sequence[str]] = None,
    ) -> None:
        self.model_path = str(model_path)
        if isinstance(backend, PoseBackend):
            self._backend = backend
        else:
            self._backend = create_backend(
                backend,
                self.model_path,
                input_name=input_name,
                providers=providers,
            )

        self.failure_count = 0
        self._failure_streak = 0

    @property
    def backend_name(self) -> str:
        return self._backend.name

    @property
    def is_loaded(self) -> bool:
        return self._backend.is_loaded

    def load(self) -> None:
        if self.is_loaded:
            return

        if not os.path.isfile(self.model_path):
            raise ModelLoadError(f"Pose model not found: {self.model_path}")

        try:
            self._backend.load()
        except Exception as exc:
            self._backend.close()
            raise ModelLoadError(f"Failed to load pose model {self.model_path}: {exc}") from exc

        print(f"✅ Pose model loaded ({self.backend_name}): {self.model_path}")

    def infer(self, tensor: np.ndarray) -> InferenceResult:
        if not self.is_loaded:
            return InferenceResult.no_result("model not loaded")

        try:
            output = self._backend.run(tensor)
        except Exception as exc:
            return self._record_failure(f"{type(exc).__name__}: {exc}")

        if output is None or np.ndim(output) != 3:
            shape = None if output is None else np.shape(output)
            return self._record_failure(f"unexpected output shape {shape}")

        if self._failure_streak:
            print(f"✅ Inference recovered after {self._failure_streak} failed tick(s)")
            self._failure_streak = 0
        return InferenceResult(output=output)

    def close(self) -> None:
        if self.is_loaded:
            self._backend.close()
            print(f"Pose model released: {self.model_path}")

    def _record_failure(self, reason: str) -> InferenceResult:
        self.failure_count += 1
        if self._failure_streak == 0:
            print(f"⚠️  Inference failed, holding last position: {reason}", file=sys.stderr)
        self._failure_streak += 1
        return InferenceResult.no_result(reason)

    def __enter__(self) -> "PoseInferenceAdapter":
        self.load()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
