"""
Scan pipeline: capture → recognize → generate → speak.

One coroutine per scan. A new scan() supersedes the running one: the active
id is bumped and the old task is cancelled. Every state change and every
event goes through _enter()/_publish(), which drop anything whose scan id is
no longer active, so a late completion from an old scan cannot touch the
presenter or the audio.

Failure policy per stage:
  capture / recognition → FAILED (terminal for the scan)
  generation            → fallback apology text, scan continues
  synthesis / playback  → logged only, scan still ends IDLE
"""
import asyncio
import time
from typing import Optional

from arfacts.orchestrator import errors
from arfacts.orchestrator.contracts import (
    PipelineState, RESTING_STATES, ScanRequest, ScanResult, RecognitionResult,
    StateChanged, ObjectRecognized, FactsReady, PlaybackStarted, Failed,
)
from arfacts.orchestrator.errors import (
    CaptureFailure, NoObjectsFound, DetectionError, HttpError, EmptyCompletion,
)

NO_OBJECTS_TEXT = "No objects detected"
FALLBACK_EMPTY_COMPLETION = "Sorry, I couldn't generate information about this object."
FALLBACK_TRANSPORT = "Sorry, there was an error communicating with the AI assistant."


class ScanPipeline:
    def __init__(self, capture, vision, facts, speech, presenter, status_store, voice=None):
        self.capture = capture
        self.vision = vision
        self.facts = facts
        self.speech = speech
        self.presenter = presenter
        self.status = status_store
        self.voice = voice

        self._state = PipelineState.IDLE
        self._failure_reason: Optional[str] = None
        self._next_id = 0
        self._active_id: Optional[int] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def failure_reason(self) -> Optional[str]:
        return self._failure_reason

    @property
    def active_scan_id(self) -> Optional[int]:
        return self._active_id

    @property
    def busy(self) -> bool:
        return self._state not in RESTING_STATES

    # ── entry points ────────────────────────────────────────────────────────

    def start_scan(self) -> asyncio.Task:
        """Begin a new scan, superseding any running one. Must be called on the loop."""
        self._next_id += 1
        req = ScanRequest(scan_id=self._next_id)

        old = self._task
        if old is not None and not old.done():
            self.status.log(f"scan={req.scan_id} supersedes scan={self._active_id} ({self._state.value})")
            old.cancel()

        self._active_id = req.scan_id
        self._task = asyncio.create_task(self._run(req), name=f"scan-{req.scan_id}")
        return self._task

    async def scan(self) -> ScanResult:
        task = self.start_scan()
        scan_id = self._active_id
        t0 = time.monotonic()
        # asyncio.wait does not raise when the task is cancelled by a newer scan
        await asyncio.wait({task})
        if task.cancelled():
            return ScanResult(
                ok=False, scan_id=scan_id, duration_ms=_elapsed_ms(t0),
                error_code=errors.ERR_SUPERSEDED, reason="superseded by a newer scan",
            )
        return task.result()

    async def aclose(self):
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.wait({self._task})
        self._active_id = None

    # ── gated side effects ──────────────────────────────────────────────────

    def _is_active(self, scan_id: int) -> bool:
        return scan_id == self._active_id

    def _enter(self, scan_id: int, state: PipelineState, reason: Optional[str] = None) -> bool:
        if not self._is_active(scan_id):
            self.status.log(f"scan={scan_id} stale, dropping state {state.value}")
            return False
        self._state = state
        self._failure_reason = reason
        self.presenter.publish(StateChanged(scan_id, state))
        return True

    def _publish(self, event) -> bool:
        if not self._is_active(event.scan_id):
            self.status.log(f"scan={event.scan_id} stale, dropping {type(event).__name__}")
            return False
        self.presenter.publish(event)
        return True

    def _fail(self, scan_id: int, t0: float, code: str, reason: str,
              recognized: Optional[RecognitionResult] = None) -> ScanResult:
        self.status.log(f"scan={scan_id} failed code={code}: {reason}")
        if self._enter(scan_id, PipelineState.FAILED, reason):
            self._publish(Failed(scan_id, reason))
        return ScanResult(ok=False, scan_id=scan_id, duration_ms=_elapsed_ms(t0),
                          error_code=code, reason=reason, recognized=recognized)

    # ── the pipeline ────────────────────────────────────────────────────────

    async def _run(self, req: ScanRequest) -> ScanResult:
        sid = req.scan_id
        t0 = time.monotonic()
        recognized: Optional[RecognitionResult] = None
        try:
            # 1) capture
            self.status.log(f"scan={sid} start")
            self._enter(sid, PipelineState.CAPTURING)
            try:
                req.image = await self.capture.capture_screen()
            except CaptureFailure as e:
                return self._fail(sid, t0, errors.ERR_CAPTURE, f"Capture failed: {e}")
            if not req.image:
                return self._fail(sid, t0, errors.ERR_CAPTURE, "Capture failed: empty frame")

            # 2) recognize
            self._enter(sid, PipelineState.RECOGNIZING)
            try:
                recognized = await self.vision.detect(req.image)
            except NoObjectsFound:
                return self._fail(sid, t0, errors.ERR_NO_OBJECTS, NO_OBJECTS_TEXT)
            except (DetectionError, HttpError) as e:
                return self._fail(sid, t0, e.code, f"Error: {e}")
            self.status.log(f"scan={sid} recognized {recognized.label} conf={recognized.confidence:.2f}")
            self._publish(ObjectRecognized(sid, recognized.label))

            # 3) generate
            self._enter(sid, PipelineState.GENERATING)
            facts = await self._generate(sid, recognized.label)
            self._publish(FactsReady(sid, facts))

            # 4) speak (best effort)
            spoken = await self._speak(sid, facts)

            self._enter(sid, PipelineState.IDLE)
            dt = _elapsed_ms(t0)
            self.status.log(f"scan={sid} done spoken={spoken} dt={dt}ms")
            return ScanResult(ok=True, scan_id=sid, duration_ms=dt,
                              recognized=recognized, facts=facts, spoken=spoken)

        except Exception as e:
            return self._fail(sid, t0, errors.ERR_UNKNOWN, f"Error: {type(e).__name__}: {e}", recognized)

    async def _generate(self, sid: int, label: str) -> str:
        try:
            return await self.facts.generate_facts(label)
        except EmptyCompletion as e:
            self.status.log(f"scan={sid} generation empty: {e}")
            return FALLBACK_EMPTY_COMPLETION
        except HttpError as e:
            self.status.log(f"scan={sid} generation failed: {e}")
            return FALLBACK_TRANSPORT

    async def _speak(self, sid: int, text: str) -> bool:
        if not self._enter(sid, PipelineState.SYNTHESIZING):
            return False
        try:
            artifact = await self.speech.synthesize(text, self.voice)
            playback = await self.speech.play(artifact)
        except Exception as e:
            self.status.log(f"scan={sid} speech skipped: {type(e).__name__}: {e}")
            return False

        try:
            self._enter(sid, PipelineState.SPEAKING)
            self._publish(PlaybackStarted(sid))
            await playback.wait()
        except asyncio.CancelledError:
            playback.stop()
            raise
        return True


def _elapsed_ms(t0: float) -> int:
    return int((time.monotonic() - t0) * 1000)
