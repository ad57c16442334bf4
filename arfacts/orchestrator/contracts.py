from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RecognitionSource(str, Enum):
    OBJECT = "OBJECT"   # localizedObjectAnnotations
    LABEL = "LABEL"     # labelAnnotations


class PipelineState(str, Enum):
    IDLE = "idle"
    CAPTURING = "capturing"
    RECOGNIZING = "recognizing"
    GENERATING = "generating"
    SYNTHESIZING = "synthesizing"
    SPEAKING = "speaking"
    FAILED = "failed"


# states in which no scan is running; a new scan supersedes nothing
RESTING_STATES = (PipelineState.IDLE, PipelineState.FAILED)


class VoiceGender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"


@dataclass(frozen=True)
class RecognitionResult:
    label: str                 # lowercase, e.g. "coffee mug"
    confidence: float
    source: RecognitionSource


@dataclass
class ScanRequest:
    scan_id: int
    image: Optional[bytes] = None   # JPEG, filled once capture completes


@dataclass
class ScanResult:
    ok: bool
    scan_id: int
    duration_ms: int
    error_code: Optional[str] = None
    reason: Optional[str] = None
    recognized: Optional[RecognitionResult] = None
    facts: Optional[str] = None
    spoken: bool = False


# ── Events published to the presentation collaborator ──────────────────────

@dataclass(frozen=True)
class StateChanged:
    scan_id: int
    state: PipelineState


@dataclass(frozen=True)
class ObjectRecognized:
    scan_id: int
    label: str


@dataclass(frozen=True)
class FactsReady:
    scan_id: int
    text: str


@dataclass(frozen=True)
class PlaybackStarted:
    scan_id: int


@dataclass(frozen=True)
class Failed:
    scan_id: int
    reason: str
