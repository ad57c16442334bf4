from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from arfacts.adapters.http.json_client import HttpJsonClient
from arfacts.orchestrator.contracts import ScanResult
from arfacts.orchestrator.state_machine import ScanPipeline
from arfacts.services.models import (
    ScanResponse, TriggerResponse, StatusResponse, HealthResponse, RecognizeOut,
)
from arfacts.services.settings import Settings
from arfacts.services.status_store import StatusStore


def _build_capture(settings: Settings, status: StatusStore):
    if settings.capture_adapter == "camera":
        from arfacts.adapters.capture.cv2_camera import CV2Camera
        return CV2Camera(status, index=settings.camera_index, quality=settings.jpeg_quality)
    if settings.capture_adapter == "mock":
        from arfacts.adapters.capture.mock_capture import MockCapture
        return MockCapture(status, refs_dir=settings.mock_capture_dir)
    from arfacts.adapters.capture.screen_capture import ScreenCapture, parse_region
    return ScreenCapture(status, region=parse_region(settings.capture_region),
                         quality=settings.jpeg_quality, chrome=status)


def _build_vision(settings: Settings, status: StatusStore, http: HttpJsonClient):
    from arfacts.adapters.vision.mock_vision import MockVision
    if settings.vision_adapter == "google":
        from arfacts.adapters.vision.google_vision import GoogleVision
        vision = GoogleVision(status, http, settings.google_api_key, url=settings.vision_url)
        if vision._ready:
            return vision
        status.log("vision: GoogleVision not ready, falling back to mock")
    return MockVision(status)


def _build_facts(settings: Settings, status: StatusStore, http: HttpJsonClient):
    from arfacts.adapters.llm.sample_facts import SampleFacts
    if settings.facts_adapter == "openrouter":
        from arfacts.adapters.llm.openrouter_facts import OpenRouterFacts
        facts = OpenRouterFacts(
            status, http, settings.openrouter_api_key,
            model=settings.openrouter_model, url=settings.openrouter_url,
            temperature=settings.facts_temperature, max_tokens=settings.facts_max_tokens,
        )
        if facts._ready:
            return facts
        status.log("facts: OpenRouter not ready, falling back to sample facts")
    return SampleFacts(status)


def _build_speech(settings: Settings, status: StatusStore, http: HttpJsonClient):
    from arfacts.adapters.tts.player_local import LocalPlayer, NullPlayer
    player = NullPlayer(status) if settings.audio_player == "null" else LocalPlayer(status)
    common = dict(default_voice=settings.voice, cleanup_delay=settings.audio_cleanup_delay_s)
    if settings.tts_adapter == "google":
        from arfacts.adapters.tts.google_tts import GoogleTTS
        tts = GoogleTTS(status, http, settings.google_tts_api_key, player,
                        language_code=settings.tts_language, url=settings.tts_url, **common)
        if tts._ready:
            return tts
        status.log("tts: GoogleTTS not ready, falling back to edge-tts")
    from arfacts.adapters.tts.edge_tts_voice import EdgeTTS
    return EdgeTTS(status, player, **common)


def build_pipeline(settings: Settings, status: StatusStore, http: HttpJsonClient) -> ScanPipeline:
    capture = _build_capture(settings, status)
    vision = _build_vision(settings, status, http)
    facts = _build_facts(settings, status, http)
    speech = _build_speech(settings, status, http)
    for role, adapter in (("capture", capture), ("vision", vision), ("facts", facts), ("tts", speech)):
        status.log(f"{role} adapter: {type(adapter).__name__}")
    return ScanPipeline(capture=capture, vision=vision, facts=facts, speech=speech,
                        presenter=status, status_store=status, voice=settings.voice)


def _scan_response(rr: ScanResult) -> ScanResponse:
    rec = rr.recognized
    rec_out = RecognizeOut(label=rec.label, confidence=rec.confidence, source=rec.source.value) if rec else None
    return ScanResponse(
        ok=rr.ok, scan_id=rr.scan_id, duration_ms=rr.duration_ms, error_code=rr.error_code,
        reason=rr.reason, recognized=rec_out, facts=rr.facts, spoken=rr.spoken,
    )


def create_app(pipeline: Optional[ScanPipeline] = None, status: Optional[StatusStore] = None,
               settings: Optional[Settings] = None) -> FastAPI:
    http = None
    if pipeline is None:
        settings = settings or Settings.from_env()
        status = status or StatusStore()
        http = HttpJsonClient(status, timeout=settings.http_timeout_s)
        pipeline = build_pipeline(settings, status, http)
    status = status or pipeline.status

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        await pipeline.aclose()
        await pipeline.speech.aclose()
        if http is not None:
            await http.aclose()

    app = FastAPI(title="arfacts", lifespan=lifespan)
    app.state.pipeline = pipeline
    app.state.status = status

    @app.post("/scan", response_model=ScanResponse)
    async def scan():
        """Run one full scan and return its outcome. Supersedes a running scan."""
        return _scan_response(await pipeline.scan())

    @app.post("/trigger", response_model=TriggerResponse)
    async def trigger():
        """Start a scan in the background; poll /status for progress."""
        previous = pipeline.active_scan_id if pipeline.busy else None
        pipeline.start_scan()
        status.log(f"TRIGGER scan={pipeline.active_scan_id}")
        return TriggerResponse(ok=True, scan_id=pipeline.active_scan_id, superseded=previous)

    @app.get("/status", response_model=StatusResponse)
    async def get_status():
        return StatusResponse(
            state=pipeline.state.value,
            busy=pipeline.busy,
            scan_id=status.scan_id,
            object_name=status.object_name,
            fact_text=status.fact_text,
            result_text=status.result_text,
            failure_reason=pipeline.failure_reason,
            loading=status.loading,
            playing=status.playing,
            logs=status.logs,
        )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        adapters = {
            "capture": pipeline.capture, "vision": pipeline.vision,
            "facts": pipeline.facts, "tts": pipeline.speech,
        }
        return HealthResponse(
            api=True,
            capture_adapter=type(pipeline.capture).__name__,
            vision_adapter=type(pipeline.vision).__name__,
            facts_adapter=type(pipeline.facts).__name__,
            tts_adapter=type(pipeline.speech).__name__,
            remote_ready={role: getattr(a, "_ready", True) for role, a in adapters.items()},
        )

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
