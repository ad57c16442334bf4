"""
OpenCV webcam capture adapter.
CAMERA_INDEX env var (default 0) selects the webcam device.
"""
import asyncio

import cv2

from arfacts.adapters.capture.base import CaptureAdapter
from arfacts.orchestrator.errors import CaptureFailure


class CV2Camera(CaptureAdapter):
    def __init__(self, status_store, index: int = 0, quality: int = 75):
        self.status = status_store
        self._index = index
        self.quality = quality
        self._cap = None

    def _open(self):
        if self._cap is None or not self._cap.isOpened():
            self._cap = cv2.VideoCapture(self._index)
            if not self._cap.isOpened():
                self.status.log(f"cv2_camera: failed to open device {self._index}")

    def capture_bytes(self) -> bytes:
        self._open()
        if self._cap is None or not self._cap.isOpened():
            raise CaptureFailure(f"camera {self._index} unavailable")
        ret, frame = self._cap.read()
        if not ret or frame is None:
            raise CaptureFailure("frame capture failed")
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, self.quality])
        if not ok:
            raise CaptureFailure("jpeg encode failed")
        return bytes(buf)

    async def capture_screen(self) -> bytes:
        data = await asyncio.to_thread(self.capture_bytes)
        self.status.log(f"cv2_camera: {len(data)} bytes")
        return data

    def release(self):
        if self._cap and self._cap.isOpened():
            self._cap.release()
            self._cap = None
