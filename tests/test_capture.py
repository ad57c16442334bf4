import cv2
import numpy as np
import pytest

from arfacts.adapters.capture.mock_capture import PLACEHOLDER_JPEG, MockCapture
from arfacts.adapters.capture.screen_capture import ScreenCapture, encode_jpeg, parse_region
from arfacts.orchestrator.errors import CaptureFailure


def test_parse_region():
    assert parse_region(None) is None
    assert parse_region("") is None
    assert parse_region("10,20,640,480") == (10, 20, 640, 480)
    with pytest.raises(ValueError):
        parse_region("1,2,3")


def test_encode_jpeg_produces_decodable_image():
    rgb = np.zeros((32, 48, 3), dtype=np.uint8)
    rgb[:, :, 0] = 255
    data = encode_jpeg(rgb, quality=75)

    assert data[:2] == b"\xff\xd8"
    decoded = cv2.imdecode(np.frombuffer(data, np.uint8), cv2.IMREAD_COLOR)
    assert decoded.shape == (32, 48, 3)
    # red in RGB comes back as red in OpenCV's BGR
    assert decoded[16, 24, 2] > 200 and decoded[16, 24, 0] < 50


@pytest.mark.asyncio
async def test_screen_capture_hides_chrome_during_grab(status):
    seen = []

    class Grabber(ScreenCapture):
        def _grab(self):
            seen.append(status.chrome_hidden)
            return b"jpeg"

    data = await Grabber(status, chrome=status).capture_screen()

    assert data == b"jpeg"
    assert seen == [True]
    assert not status.chrome_hidden


@pytest.mark.asyncio
async def test_screen_capture_restores_chrome_on_failure(status):
    class Broken(ScreenCapture):
        def _grab(self):
            raise CaptureFailure("screenshot failed: no display")

    with pytest.raises(CaptureFailure):
        await Broken(status, chrome=status).capture_screen()
    assert not status.chrome_hidden


@pytest.mark.asyncio
async def test_mock_capture_placeholder_and_refs(status, tmp_path):
    assert await MockCapture(status).capture_screen() == PLACEHOLDER_JPEG

    (tmp_path / "cat.jpg").write_bytes(b"cat-bytes")
    assert await MockCapture(status, refs_dir=tmp_path).capture_screen() == b"cat-bytes"

    empty = tmp_path / "empty"
    empty.mkdir()
    with pytest.raises(CaptureFailure):
        await MockCapture(status, refs_dir=empty).capture_screen()
