import logging
from dataclasses import dataclass, field
from typing import Optional, List

from arfacts.orchestrator.contracts import (
    PipelineState, StateChanged, ObjectRecognized, FactsReady, PlaybackStarted, Failed,
)

logger = logging.getLogger("arfacts")

MAX_LOG_LINES = 200

PROCESSING_TEXT = "Processing image..."
GENERATING_TEXT = "Generating interesting facts..."

_EVENTS = (StateChanged, ObjectRecognized, FactsReady, PlaybackStarted, Failed)


def capitalize_words(text: str) -> str:
    """'coffee mug' -> 'Coffee Mug'. Only the first letter of each word is touched."""
    return " ".join(w[:1].upper() + w[1:] if w else w for w in text.split(" "))


@dataclass
class StatusStore:
    """Shared log sink + presentation model rendered by GET /status."""
    state: PipelineState = PipelineState.IDLE
    scan_id: Optional[int] = None
    object_name: Optional[str] = None
    fact_text: Optional[str] = None
    result_text: Optional[str] = None
    failure_reason: Optional[str] = None
    loading: bool = False
    playing: bool = False
    chrome_hidden: bool = False
    logs: List[str] = field(default_factory=list)

    def log(self, msg: str):
        logger.info(msg)
        self.logs.append(msg)
        if len(self.logs) > MAX_LOG_LINES:
            self.logs = self.logs[-MAX_LOG_LINES:]

    # ── presentation collaborator ──────────────────────────────────────────

    def publish(self, event) -> None:
        if not isinstance(event, _EVENTS):
            raise TypeError(f"unknown pipeline event {type(event).__name__}")
        self.scan_id = event.scan_id
        if isinstance(event, StateChanged):
            self._on_state(event.state)
        elif isinstance(event, ObjectRecognized):
            self.object_name = capitalize_words(event.label)
            self.result_text = f"Detected: {event.label}"
            self.fact_text = GENERATING_TEXT
        elif isinstance(event, FactsReady):
            self.fact_text = event.text
            self.loading = False
        elif isinstance(event, PlaybackStarted):
            self.playing = True
        elif isinstance(event, Failed):
            self.failure_reason = event.reason
            self.result_text = event.reason
            self.loading = False

    def _on_state(self, state: PipelineState):
        self.state = state
        if state == PipelineState.CAPTURING:
            # new scan: hide the previous card
            self.object_name = None
            self.fact_text = None
            self.failure_reason = None
            self.result_text = None
            self.playing = False
        elif state == PipelineState.RECOGNIZING:
            self.loading = True
            self.result_text = PROCESSING_TEXT
        elif state == PipelineState.IDLE:
            self.loading = False
            self.playing = False

    def hide_chrome(self):
        self.chrome_hidden = True

    def restore_chrome(self):
        self.chrome_hidden = False
