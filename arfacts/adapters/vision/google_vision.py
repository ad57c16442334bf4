"""
Google Cloud Vision object recognizer.

One images:annotate call asks for both OBJECT_LOCALIZATION and
LABEL_DETECTION (top 5 each). Selection policy:
  1. first localized object, if any
  2. else first label annotation
  3. else NoObjectsFound
Rank order from the service is trusted; no score threshold.

Requires GOOGLE_API_KEY (sent as ?key=...).
"""
import base64
from typing import Optional, List

from pydantic import BaseModel

from arfacts.adapters.http.json_client import HttpJsonClient
from arfacts.adapters.vision.base import VisionAdapter
from arfacts.orchestrator.contracts import RecognitionResult, RecognitionSource
from arfacts.orchestrator.errors import NoObjectsFound, MalformedResponse

VISION_API_URL = "https://vision.googleapis.com/v1/images:annotate"
MAX_RESULTS = 5


class EntityAnnotation(BaseModel):
    description: str = ""
    score: float = 0.0


class LocalizedObjectAnnotation(BaseModel):
    name: str = ""
    score: float = 0.0


class AnnotateImageResponse(BaseModel):
    labelAnnotations: List[EntityAnnotation] = []
    localizedObjectAnnotations: List[LocalizedObjectAnnotation] = []
    error: Optional[dict] = None


class VisionResponse(BaseModel):
    responses: List[AnnotateImageResponse] = []


def build_request(image_bytes: bytes, max_results: int = MAX_RESULTS) -> dict:
    b64 = base64.standard_b64encode(image_bytes).decode("utf-8")
    return {
        "requests": [
            {
                "image": {"content": b64},
                "features": [
                    {"type": "OBJECT_LOCALIZATION", "maxResults": max_results},
                    {"type": "LABEL_DETECTION", "maxResults": max_results},
                ],
            }
        ]
    }


def select_label(resp: VisionResponse) -> RecognitionResult:
    if not resp.responses:
        raise MalformedResponse("vision response has no entries")
    first = resp.responses[0]
    if first.error:
        raise MalformedResponse(f"vision error: {first.error.get('message', first.error)}")

    if first.localizedObjectAnnotations:
        obj = first.localizedObjectAnnotations[0]
        name, score, source = obj.name, obj.score, RecognitionSource.OBJECT
    elif first.labelAnnotations:
        lab = first.labelAnnotations[0]
        name, score, source = lab.description, lab.score, RecognitionSource.LABEL
    else:
        raise NoObjectsFound()

    if not name.strip():
        raise MalformedResponse(f"first {source.value.lower()} annotation has no name")
    return RecognitionResult(label=name.strip().lower(), confidence=score, source=source)


class GoogleVision(VisionAdapter):
    def __init__(self, status_store, http: HttpJsonClient, api_key: Optional[str],
                 url: str = VISION_API_URL, max_results: int = MAX_RESULTS):
        self.status = status_store
        self.http = http
        self._api_key = api_key
        self.url = url
        self.max_results = max_results
        self._ready = bool(api_key)
        if self._ready:
            self.status.log("google_vision: ready")
        else:
            self.status.log("google_vision: GOOGLE_API_KEY not set")

    async def detect(self, image_bytes: bytes) -> RecognitionResult:
        self.status.log(f"google_vision: annotating {len(image_bytes)} bytes")
        resp = await self.http.send(
            self.url,
            build_request(image_bytes, self.max_results),
            response_model=VisionResponse,
            params={"key": self._api_key},
        )
        result = select_label(resp)
        self.status.log(
            f"google_vision: → {result.label} ({result.source.value}, conf={result.confidence:.2f})"
        )
        return result
