"""Factory for the speech client."""

from app.adapters.speech.base import AbstractSpeechClient
from app.adapters.speech.elevenlabs_client import ElevenLabsClient
from app.core.config import settings
from app.core.errors import ConfigurationAppError


def create_speech_client() -> AbstractSpeechClient:
    """Instantiate the ElevenLabs client from settings.

    Raises:
        ConfigurationAppError: If ELEVENLABS_API_KEY is not set.
    """
    if not settings.speech.api_key:
        raise ConfigurationAppError(
            code="speech_missing_api_key",
            message="Speech service is not configured",
            details={"setting": "ELEVENLABS_API_KEY"},
        )
    return ElevenLabsClient(
        api_key=settings.speech.api_key,
        base_url=settings.speech.base_url,
        tts_model=settings.speech.tts_model,
        stt_model=settings.speech.stt_model,
        timeout_seconds=settings.speech.timeout_seconds,
    )
