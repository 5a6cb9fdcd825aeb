"""OpenCV camera source with an explicit activate/deactivate lifecycle."""

from __future__ import annotations

from typing import Optional, Union

import cv2

from .errors import CameraUnavailableError
from .types import Frame


class CameraSource:
    """Supplies the latest camera frame on demand.

    ``source`` is a webcam index or a video file path. Resolution is only
    requested when both ``width`` and ``height`` are given; otherwise the
    device's first offered format is used.
    """

    def __init__(
        self,
        source: Union[int, str] = 0,
        *,
        width: Optional[int] = None,
        height: Optional[int] = None,
        channel_order: str = "BGR",
    ) -> None:
        if isinstance(source, str) and source.isdigit():
            source = int(source)
        self.source = source
        self.width = width
        self.height = height
        self.channel_order = channel_order
        self._capture: Optional[cv2.VideoCapture] = None

    @property
    def is_active(self) -> bool:
        return self._capture is not None

    @property
    def is_file(self) -> bool:
        return isinstance(self.source, str)

    def activate(self) -> None:
        if self._capture is not None:
            return

        capture = cv2.VideoCapture(self.source)
        if not capture.isOpened():
            capture.release()
            raise CameraUnavailableError(f"Could not open input source: {self.source}")

        if self.width and self.height and not self.is_file:
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, int(self.width))
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, int(self.height))

        self._capture = capture
        actual_w = int(capture.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        actual_h = int(capture.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
        print(f"✅ Camera activated: {self.source} ({actual_w}x{actual_h})")

    def read_frame(self) -> Optional[Frame]:
        if self._capture is None:
            return None

        ret, image = self._capture.read()
        if not ret or image is None:
            return None
        return Frame.from_array(image, channel_order=self.channel_order)

    def deactivate(self) -> None:
        if self._capture is None:
            return
        self._capture.release()
        self._capture = None
        print(f"Camera deactivated: {self.source}")

    def __enter__(self) -> "CameraSource":
        self.activate()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.deactivate()
