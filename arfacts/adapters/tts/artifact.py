"""
Transient audio files.

Each synthesized clip is written to its own file inside one temp directory
created lazily per process. The AudioArtifact owns the file until release().
"""
import asyncio
import logging
import os
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from arfacts.orchestrator.errors import TempFileCleanupFailure

logger = logging.getLogger("arfacts")

_TEMP_DIR: Optional[Path] = None


def process_temp_dir() -> Path:
    global _TEMP_DIR
    if _TEMP_DIR is None or not _TEMP_DIR.is_dir():
        _TEMP_DIR = Path(tempfile.mkdtemp(prefix=f"arfacts-tts-{os.getpid()}-"))
    return _TEMP_DIR


def remove_process_temp_dir() -> bool:
    """Remove the per-process directory if it exists and is empty."""
    global _TEMP_DIR
    if _TEMP_DIR is None:
        return True
    try:
        _TEMP_DIR.rmdir()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.info(f"tts: temp dir kept: {TempFileCleanupFailure(str(_TEMP_DIR), e)}")
        return False
    _TEMP_DIR = None
    return True


def _drop_orphan(path: Path):
    def _done(fut: asyncio.Future):
        if not fut.cancelled():
            fut.exception()
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.info(f"tts: cleanup failed: {TempFileCleanupFailure(str(path), e)}")
    return _done


@dataclass
class AudioArtifact:
    data: bytes
    path: Path
    mime_type: str = "audio/mpeg"
    released: bool = False

    @classmethod
    async def write(cls, data: bytes, suffix: str = ".mp3", directory: Optional[Path] = None) -> "AudioArtifact":
        path = (directory or process_temp_dir()) / f"tts_{uuid.uuid4().hex[:12]}{suffix}"
        fut = asyncio.ensure_future(asyncio.to_thread(path.write_bytes, data))
        try:
            await asyncio.shield(fut)
        except asyncio.CancelledError:
            # the worker thread cannot be interrupted; delete once it finishes
            fut.add_done_callback(_drop_orphan(path))
            raise
        return cls(data=data, path=path)

    def release(self, status_store=None) -> bool:
        """Delete the backing file. Failures are logged, never raised."""
        if self.released:
            return True
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            err = TempFileCleanupFailure(str(self.path), e)
            if status_store is not None:
                status_store.log(f"tts: cleanup failed: {err}")
            return False
        self.released = True
        return True
