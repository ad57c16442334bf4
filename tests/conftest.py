import asyncio
import json
from typing import Callable, Optional

import httpx
import pytest

from arfacts.adapters.http.json_client import HttpJsonClient
from arfacts.adapters.tts.base import SpeechSynthesizer
from arfacts.adapters.tts.player_local import AudioPlayer, Playback
from arfacts.orchestrator.contracts import RecognitionResult, RecognitionSource
from arfacts.orchestrator.state_machine import ScanPipeline
from arfacts.services.status_store import StatusStore


class RecordingPresenter(StatusStore):
    """StatusStore that also keeps every event it was handed."""

    def __init__(self):
        super().__init__()
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)
        super().publish(event)

    def of_type(self, cls, scan_id: Optional[int] = None):
        return [e for e in self.events if isinstance(e, cls) and (scan_id is None or e.scan_id == scan_id)]


class FakeCapture:
    def __init__(self, data: bytes = b"\xff\xd8jpeg\xff\xd9", error: Optional[Exception] = None):
        self.data = data
        self.error = error
        self.calls = 0

    async def capture_screen(self) -> bytes:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.data


class FakeVision:
    """Returns queued outcomes in order; an asyncio.Event in the queue blocks until set."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []
        self.entered = asyncio.Event()

    async def detect(self, image_bytes: bytes) -> RecognitionResult:
        self.calls.append(image_bytes)
        self.entered.set()
        outcome = self.outcomes.pop(0) if self.outcomes else "cat"
        if isinstance(outcome, tuple):
            gate, outcome = outcome
            await gate.wait()
        if isinstance(outcome, Exception):
            raise outcome
        return RecognitionResult(label=outcome, confidence=0.9, source=RecognitionSource.OBJECT)


class FakeFacts:
    def __init__(self, text: Optional[str] = None, error: Optional[Exception] = None,
                 gate: Optional[asyncio.Event] = None):
        self.text = text
        self.error = error
        self.gate = gate
        self.labels = []

    async def generate_facts(self, label: str) -> str:
        self.labels.append(label)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.text if self.text is not None else f"This is a {label}. Fact one. Fact two."


class FakePlayer(AudioPlayer):
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.started = []

    async def start(self, path) -> Playback:
        if self.error is not None:
            raise self.error
        self.started.append(path)
        return Playback()


class FakeSpeech(SpeechSynthesizer):
    def __init__(self, status_store, player=None, audio: bytes = b"ID3fake", error: Optional[Exception] = None):
        super().__init__(status_store, player or FakePlayer(), cleanup_delay=0.0)
        self.audio = audio
        self.error = error
        self.texts = []

    async def _fetch_audio(self, text, voice) -> bytes:
        self.texts.append(text)
        if self.error is not None:
            raise self.error
        return self.audio


@pytest.fixture
def status():
    return StatusStore()


@pytest.fixture
def presenter():
    return RecordingPresenter()


@pytest.fixture
def make_pipeline(presenter):
    def _make(capture=None, vision=None, facts=None, speech=None) -> ScanPipeline:
        return ScanPipeline(
            capture=capture or FakeCapture(),
            vision=vision or FakeVision(),
            facts=facts or FakeFacts(),
            speech=speech or FakeSpeech(presenter),
            presenter=presenter,
            status_store=presenter,
        )
    return _make


@pytest.fixture
def mock_http(status):
    """Build an HttpJsonClient whose requests go to *handler* instead of the network."""
    clients = []

    def _make(handler: Callable[[httpx.Request], httpx.Response], timeout: float = 5.0) -> HttpJsonClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return HttpJsonClient(status, timeout=timeout, client=client)

    return _make


def json_body(request: httpx.Request) -> dict:
    return json.loads(request.content.decode("utf-8"))
