"""
Screen-region capture.

pyautogui grabs the pixels, OpenCV encodes them to JPEG (quality 75 by
default). The presenter's chrome (scan button, hints, spinner) is hidden for
the duration of the grab so it does not end up in the image.

CAPTURE_REGION env var: "left,top,width,height" (default: full screen).
"""
import asyncio
from typing import Optional, Tuple

import cv2
import numpy as np

from arfacts.adapters.capture.base import CaptureAdapter
from arfacts.orchestrator.errors import CaptureFailure

Region = Tuple[int, int, int, int]


def parse_region(raw: Optional[str]) -> Optional[Region]:
    if not raw:
        return None
    parts = [int(p) for p in raw.split(",")]
    if len(parts) != 4:
        raise ValueError(f"CAPTURE_REGION needs 4 integers, got {raw!r}")
    return parts[0], parts[1], parts[2], parts[3]


def encode_jpeg(rgb: np.ndarray, quality: int = 75) -> bytes:
    bgr = cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)
    ok, buf = cv2.imencode(".jpg", bgr, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise CaptureFailure("jpeg encode failed")
    return bytes(buf)


class ScreenCapture(CaptureAdapter):
    def __init__(self, status_store, region: Optional[Region] = None, quality: int = 75, chrome=None):
        self.status = status_store
        self.region = region
        self.quality = quality
        self.chrome = chrome

    def _grab(self) -> bytes:
        # imported here: pyautogui needs a display at import time on Linux
        import pyautogui

        try:
            shot = pyautogui.screenshot(region=self.region)
        except Exception as e:
            raise CaptureFailure(f"screenshot failed: {e}") from e
        return encode_jpeg(np.asarray(shot.convert("RGB")), self.quality)

    async def capture_screen(self) -> bytes:
        if self.chrome is not None:
            self.chrome.hide_chrome()
        try:
            data = await asyncio.to_thread(self._grab)
        finally:
            if self.chrome is not None:
                self.chrome.restore_chrome()
        self.status.log(f"screen_capture: {len(data)} bytes region={self.region or 'full'}")
        return data
