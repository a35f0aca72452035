"""Speech adapter layer - text-to-speech and transcription providers."""

from app.adapters.speech.base import AbstractSpeechClient
from app.adapters.speech.elevenlabs_client import ElevenLabsClient
from app.adapters.speech.factory import create_speech_client

__all__ = [
    "AbstractSpeechClient",
    "ElevenLabsClient",
    "create_speech_client",
]
