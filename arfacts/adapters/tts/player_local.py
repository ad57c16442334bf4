"""
Audio players, cross-platform.

LocalPlayer picks the first available command-line decoder:
  afplay (macOS) → ffplay → mpv → mpg123
NullPlayer only logs; used headless and in tests.

start() returns as soon as the decoder process is running; Playback.wait()
resolves when the process exits, which is the acknowledgement that the file
is no longer needed.
"""
import asyncio
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Optional

from arfacts.orchestrator.errors import DecodeFailure


class Playback:
    def __init__(self, proc: Optional[asyncio.subprocess.Process] = None):
        self._proc = proc

    @property
    def running(self) -> bool:
        return self._proc is not None and self._proc.returncode is None

    async def wait(self) -> Optional[int]:
        if self._proc is None:
            return 0
        return await self._proc.wait()

    def stop(self):
        if self.running:
            self._proc.terminate()


class AudioPlayer:
    async def start(self, path: Path) -> Playback:
        raise NotImplementedError


class LocalPlayer(AudioPlayer):
    def __init__(self, status_store):
        self.status = status_store

    def _command(self, path: Path) -> Optional[list]:
        p = str(path)
        if sys.platform == "darwin":
            return ["afplay", p]
        if shutil.which("ffplay"):
            return ["ffplay", "-nodisp", "-autoexit", "-loglevel", "quiet", p]
        if shutil.which("mpv"):
            return ["mpv", "--no-video", "--really-quiet", p]
        if shutil.which("mpg123"):
            return ["mpg123", "-q", p]
        return None

    async def start(self, path: Path) -> Playback:
        cmd = self._command(path)
        if cmd is None:
            raise DecodeFailure("no audio player found (install ffplay, mpv or mpg123)")
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise DecodeFailure(f"{cmd[0]} failed to start: {e}") from e
        self.status.log(f"player: {cmd[0]} playing {path.name}")
        return Playback(proc)


class NullPlayer(AudioPlayer):
    def __init__(self, status_store):
        self.status = status_store

    async def start(self, path: Path) -> Playback:
        self.status.log(f"player: no audio output, would play {path.name}")
        return Playback()
