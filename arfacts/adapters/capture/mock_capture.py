"""Mock capture: serves a random reference image from a directory, for testing."""
import random
from pathlib import Path
from typing import Optional

from arfacts.adapters.capture.base import CaptureAdapter
from arfacts.orchestrator.errors import CaptureFailure

# SOI/EOI markers around a tag; nothing downstream decodes it
PLACEHOLDER_JPEG = b"\xff\xd8\xff\xe0mock-frame\xff\xd9"


class MockCapture(CaptureAdapter):
    def __init__(self, status_store, refs_dir: Optional[Path] = None):
        self.status = status_store
        self.refs_dir = Path(refs_dir) if refs_dir else None

    async def capture_screen(self) -> bytes:
        if self.refs_dir is None:
            self.status.log("mock_capture: serving placeholder frame")
            return PLACEHOLDER_JPEG
        images = sorted(self.refs_dir.glob("*.jpg")) + sorted(self.refs_dir.glob("*.png"))
        if not images:
            raise CaptureFailure(f"no reference images in {self.refs_dir}")
        chosen = random.choice(images)
        self.status.log(f"mock_capture: serving {chosen.name}")
        return chosen.read_bytes()
