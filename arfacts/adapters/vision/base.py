from arfacts.orchestrator.contracts import RecognitionResult


class VisionAdapter:
    _ready = True

    async def detect(self, image_bytes: bytes) -> RecognitionResult:
        """Return the best RecognitionResult for a JPEG buffer.

        Raises NoObjectsFound / MalformedResponse or an HttpError.
        """
        raise NotImplementedError

    async def aclose(self):
        pass
