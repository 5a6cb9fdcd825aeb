"""Backend interface for pose model execution."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np


class PoseBackend(ABC):
    """Runs a serialized pose model on a ``[1, 3, H, W]`` float tensor.

    Implementations raise on load problems and on runtime failures; the
    adapter turns runtime failures into a no-result outcome.
    """

    name = "base"

    def __init__(self, model_path: str) -> None:
        self.model_path = model_path

    @abstractmethod
    def load(self) -> None: ...

    @abstractmethod
    def run(self, tensor: np.ndarray) -> np.ndarray: ...

    @abstractmethod
    def close(self) -> None: ...

    @property
    @abstractmethod
    def is_loaded(self) -> bool: ...
