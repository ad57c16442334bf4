"""
Google Cloud Text-to-Speech backend.

POST text:synthesize?key=...  → {"audioContent": "<base64 MP3>"}
Requires GOOGLE_TTS_API_KEY (falls back to GOOGLE_API_KEY).
"""
import base64
import binascii
from typing import Optional

from pydantic import BaseModel

from arfacts.adapters.http.json_client import HttpJsonClient
from arfacts.adapters.tts.base import SpeechSynthesizer
from arfacts.orchestrator.contracts import VoiceGender
from arfacts.orchestrator.errors import DecodeFailure

TTS_API_URL = "https://texttospeech.googleapis.com/v1/text:synthesize"

VOICE_NAMES = {
    VoiceGender.MALE: "en-US-Wavenet-D",
    VoiceGender.FEMALE: "en-US-Wavenet-F",
}


class SynthesisResponse(BaseModel):
    audioContent: str = ""


def build_request(text: str, voice: VoiceGender, language_code: str = "en-US") -> dict:
    return {
        "input": {"text": text},
        "voice": {
            "languageCode": language_code,
            "name": VOICE_NAMES[voice],
            "ssmlGender": voice.value,
        },
        "audioConfig": {"audioEncoding": "MP3"},
    }


def decode_audio(audio_content: str) -> bytes:
    if not audio_content:
        raise DecodeFailure("response has no audioContent")
    try:
        return base64.b64decode(audio_content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure(f"audioContent is not valid base64: {e}") from e


class GoogleTTS(SpeechSynthesizer):
    def __init__(self, status_store, http: HttpJsonClient, api_key: Optional[str], player,
                 language_code: str = "en-US", url: str = TTS_API_URL, **kwargs):
        super().__init__(status_store, player, **kwargs)
        self.http = http
        self._api_key = api_key
        self.language_code = language_code
        self.url = url
        self._ready = bool(api_key)
        if not self._ready:
            self.status.log("google_tts: GOOGLE_TTS_API_KEY not set")

    async def _fetch_audio(self, text: str, voice: VoiceGender) -> bytes:
        self.status.log(f"google_tts: synthesizing {len(text)} chars ({VOICE_NAMES[voice]})")
        resp = await self.http.send(
            self.url,
            build_request(text, voice, self.language_code),
            response_model=SynthesisResponse,
            params={"key": self._api_key},
        )
        return decode_audio(resp.audioContent)
