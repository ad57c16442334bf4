from pydantic import BaseModel
from typing import Literal, Optional

PipelineStateName = Literal[
    "idle", "capturing", "recognizing", "generating", "synthesizing", "speaking", "failed",
]


class RecognizeOut(BaseModel):
    label: str
    confidence: float
    source: Literal["OBJECT", "LABEL"]


class ScanResponse(BaseModel):
    ok: bool
    scan_id: int
    duration_ms: int
    error_code: Optional[str] = None
    reason: Optional[str] = None
    recognized: Optional[RecognizeOut] = None
    facts: Optional[str] = None
    spoken: bool = False


class TriggerResponse(BaseModel):
    ok: bool
    scan_id: int
    superseded: Optional[int] = None   # id of the scan that was cancelled, if any


class StatusResponse(BaseModel):
    state: PipelineStateName
    busy: bool
    scan_id: Optional[int] = None
    object_name: Optional[str] = None   # display form, e.g. "Coffee Mug"
    fact_text: Optional[str] = None
    result_text: Optional[str] = None
    failure_reason: Optional[str] = None
    loading: bool = False
    playing: bool = False
    logs: list[str]


class HealthResponse(BaseModel):
    api: bool
    capture_adapter: str
    vision_adapter: str
    facts_adapter: str
    tts_adapter: str
    remote_ready: dict[str, bool]
