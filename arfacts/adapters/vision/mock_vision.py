import random
from typing import Optional, Sequence

from arfacts.adapters.vision.base import VisionAdapter
from arfacts.orchestrator.contracts import RecognitionResult, RecognitionSource

DEFAULT_LABELS = ("cat", "book", "chair", "tree", "basketball")


class MockVision(VisionAdapter):
    def __init__(self, status_store, labels: Optional[Sequence[str]] = None):
        self.status = status_store
        self.labels = tuple(labels or DEFAULT_LABELS)

    async def detect(self, image_bytes: bytes) -> RecognitionResult:
        # Mock: ignore image, return random label
        label = random.choice(self.labels)
        self.status.log(f"mock_vision: {label}")
        return RecognitionResult(label=label, confidence=0.9, source=RecognitionSource.OBJECT)
