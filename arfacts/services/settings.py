import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from arfacts.orchestrator.contracts import VoiceGender


def _flag(raw: Optional[str], default: bool = False) -> bool:
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    # adapter selection
    vision_adapter: str = "google"       # google | mock
    facts_adapter: str = "openrouter"    # openrouter | sample
    tts_adapter: str = "google"          # google | edge
    capture_adapter: str = "screen"      # screen | camera | mock
    audio_player: str = "local"          # local | null

    # credentials
    google_api_key: Optional[str] = None
    google_tts_api_key: Optional[str] = None
    openrouter_api_key: Optional[str] = None

    # endpoints
    vision_url: str = "https://vision.googleapis.com/v1/images:annotate"
    tts_url: str = "https://texttospeech.googleapis.com/v1/text:synthesize"

    # text generation
    openrouter_url: str = "https://openrouter.ai/api/v1/chat/completions"
    openrouter_model: str = "deepseek/deepseek-chat-v3-0324:free"
    facts_temperature: float = 0.7
    facts_max_tokens: int = 300

    # speech
    tts_language: str = "en-US"
    tts_female_voice: bool = False
    audio_cleanup_delay_s: float = 1.0

    # capture
    capture_region: Optional[str] = None
    camera_index: int = 0
    jpeg_quality: int = 75
    mock_capture_dir: Optional[str] = None

    http_timeout_s: float = 30.0

    @property
    def voice(self) -> VoiceGender:
        return VoiceGender.FEMALE if self.tts_female_voice else VoiceGender.MALE

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = ".env") -> "Settings":
        if dotenv_path:
            load_dotenv(dotenv_path=dotenv_path, override=False)
        env = os.getenv
        google_key = env("GOOGLE_API_KEY") or None
        return cls(
            vision_adapter=env("VISION_ADAPTER", "google").lower(),
            facts_adapter=env("FACTS_ADAPTER", "openrouter").lower(),
            tts_adapter=env("TTS_ADAPTER", "google").lower(),
            capture_adapter=env("CAPTURE_ADAPTER", "screen").lower(),
            audio_player=env("AUDIO_PLAYER", "local").lower(),
            google_api_key=google_key,
            google_tts_api_key=env("GOOGLE_TTS_API_KEY") or google_key,
            openrouter_api_key=env("OPENROUTER_API_KEY") or None,
            vision_url=env("VISION_URL", cls.vision_url),
            tts_url=env("TTS_URL", cls.tts_url),
            openrouter_url=env("OPENROUTER_URL", cls.openrouter_url),
            openrouter_model=env("OPENROUTER_MODEL", cls.openrouter_model),
            facts_temperature=float(env("FACTS_TEMPERATURE", "0.7")),
            facts_max_tokens=int(env("FACTS_MAX_TOKENS", "300")),
            tts_language=env("TTS_LANGUAGE", "en-US"),
            tts_female_voice=_flag(env("TTS_FEMALE_VOICE")),
            audio_cleanup_delay_s=float(env("AUDIO_CLEANUP_DELAY_S", "1.0")),
            capture_region=env("CAPTURE_REGION") or None,
            camera_index=int(env("CAMERA_INDEX", "0")),
            jpeg_quality=int(env("JPEG_QUALITY", "75")),
            mock_capture_dir=env("MOCK_CAPTURE_DIR") or None,
            http_timeout_s=float(env("HTTP_TIMEOUT_S", "30")),
        )
