"""
Error codes reported in ScanResult / API responses, and the exception
taxonomy raised by the adapters.

Adapters raise; the orchestrator is the only place that catches and maps
them to codes and user-visible text.
"""
from typing import Optional

ERR_CAPTURE = "CAPTURE_FAILED"
ERR_NO_OBJECTS = "NO_OBJECTS"
ERR_TRANSPORT = "TRANSPORT"
ERR_SERVICE = "SERVICE"
ERR_PARSE = "PARSE"
ERR_EMPTY_COMPLETION = "EMPTY_COMPLETION"
ERR_DECODE = "DECODE"
ERR_MALFORMED = "MALFORMED"
ERR_SUPERSEDED = "SUPERSEDED"
ERR_UNKNOWN = "UNKNOWN"


class PipelineError(Exception):
    code = ERR_UNKNOWN


# ── HTTP layer ──────────────────────────────────────────────────────────────

class HttpError(PipelineError):
    pass


class TransportFailure(HttpError):
    """No usable response: connect error, timeout, dropped connection."""
    code = ERR_TRANSPORT


class ServiceError(HttpError):
    code = ERR_SERVICE

    def __init__(self, status_code: int, raw_body: str, url: str = ""):
        self.status_code = status_code
        self.raw_body = raw_body
        self.url = url
        super().__init__(f"HTTP {status_code}: {raw_body[:300]}")


class ParseFailure(HttpError):
    """Response body is not JSON or does not match the expected shape."""
    code = ERR_PARSE


# ── Stage errors ────────────────────────────────────────────────────────────

class CaptureFailure(PipelineError):
    code = ERR_CAPTURE


class DetectionError(PipelineError):
    pass


class NoObjectsFound(DetectionError):
    code = ERR_NO_OBJECTS

    def __init__(self, msg: str = "no objects detected"):
        super().__init__(msg)


class MalformedResponse(DetectionError):
    code = ERR_MALFORMED


class GenerationError(PipelineError):
    pass


class EmptyCompletion(GenerationError):
    code = ERR_EMPTY_COMPLETION


class SynthesisError(PipelineError):
    pass


class DecodeFailure(SynthesisError):
    code = ERR_DECODE


class TempFileCleanupFailure(PipelineError):
    def __init__(self, path: str, cause: Optional[BaseException] = None):
        self.path = path
        self.cause = cause
        super().__init__(f"could not delete {path}: {cause}")
