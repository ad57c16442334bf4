"""
Speech synthesis service shared by the Google and Edge backends.

synthesize(): backend audio bytes → AudioArtifact on disk
play():       hand the file to the player and schedule its deletion

The cleanup task deletes the file only after BOTH the player has exited and
cleanup_delay seconds have passed since playback started. A failed delete is
logged and dropped.
"""
import asyncio
from typing import Optional

from arfacts.adapters.tts.artifact import AudioArtifact, remove_process_temp_dir
from arfacts.adapters.tts.player_local import AudioPlayer, Playback
from arfacts.orchestrator.contracts import VoiceGender
from arfacts.orchestrator.errors import DecodeFailure

DEFAULT_CLEANUP_DELAY_S = 1.0


class SpeechSynthesizer:
    suffix = ".mp3"
    _ready = True

    def __init__(self, status_store, player: AudioPlayer,
                 default_voice: VoiceGender = VoiceGender.MALE,
                 cleanup_delay: float = DEFAULT_CLEANUP_DELAY_S):
        self.status = status_store
        self.player = player
        self.default_voice = default_voice
        self.cleanup_delay = cleanup_delay
        self._cleanups: set[asyncio.Task] = set()

    async def _fetch_audio(self, text: str, voice: VoiceGender) -> bytes:
        raise NotImplementedError

    async def synthesize(self, text: str, voice: Optional[VoiceGender] = None) -> AudioArtifact:
        voice = voice or self.default_voice
        data = await self._fetch_audio(text, voice)
        if not data:
            raise DecodeFailure("synthesis returned no audio")
        try:
            artifact = await AudioArtifact.write(data, suffix=self.suffix)
        except OSError as e:
            raise DecodeFailure(f"could not write temp audio: {e}") from e
        self.status.log(f"tts: {len(data)} bytes -> {artifact.path.name} (voice={voice.value})")
        return artifact

    async def play(self, artifact: AudioArtifact) -> Playback:
        try:
            playback = await self.player.start(artifact.path)
        except BaseException:
            artifact.release(self.status)
            raise
        task = asyncio.create_task(self._release_after(artifact, playback))
        self._cleanups.add(task)
        task.add_done_callback(self._cleanups.discard)
        return playback

    async def _release_after(self, artifact: AudioArtifact, playback: Playback):
        try:
            await asyncio.gather(playback.wait(), asyncio.sleep(self.cleanup_delay))
        finally:
            if artifact.release(self.status):
                self.status.log(f"tts: removed {artifact.path.name}")

    @property
    def pending_cleanups(self) -> int:
        return len(self._cleanups)

    async def aclose(self):
        if self._cleanups:
            await asyncio.gather(*list(self._cleanups), return_exceptions=True)
        remove_process_temp_dir()
