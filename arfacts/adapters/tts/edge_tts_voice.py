"""
Microsoft Edge online voices via edge-tts. No API key needed.

Voices:
  MALE   en-US-GuyNeural
  FEMALE en-US-JennyNeural
"""
import edge_tts

from arfacts.adapters.tts.base import SpeechSynthesizer
from arfacts.orchestrator.contracts import VoiceGender
from arfacts.orchestrator.errors import DecodeFailure, TransportFailure

VOICE_MAP = {
    VoiceGender.MALE: "en-US-GuyNeural",
    VoiceGender.FEMALE: "en-US-JennyNeural",
}


class EdgeTTS(SpeechSynthesizer):
    async def _fetch_audio(self, text: str, voice: VoiceGender) -> bytes:
        name = VOICE_MAP[voice]
        self.status.log(f"edge_tts: synthesizing {len(text)} chars ({name})")
        communicate = edge_tts.Communicate(text, name)
        buf = bytearray()
        try:
            async for chunk in communicate.stream():
                if chunk["type"] == "audio":
                    buf.extend(chunk["data"])
        except edge_tts.exceptions.NoAudioReceived as e:
            raise DecodeFailure(f"edge-tts returned no audio: {e}") from e
        except (edge_tts.exceptions.UnexpectedResponse, edge_tts.exceptions.UnknownResponse) as e:
            raise DecodeFailure(f"edge-tts stream error: {e}") from e
        except (edge_tts.exceptions.WebSocketError, OSError) as e:
            raise TransportFailure(f"edge-tts connection failed: {e}") from e
        return bytes(buf)
