"""ElevenLabs speech client adapter.

Text-to-speech streams MP3 chunks for a voice; speech-to-text uses Scribe
and returns the transcription with word-level timestamps.
"""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx
from elevenlabs import VoiceSettings
from elevenlabs.client import AsyncElevenLabs
from elevenlabs.core.api_error import ApiError

from app.adapters.speech.base import AbstractSpeechClient
from app.core.errors import UpstreamAppError

logger = logging.getLogger(__name__)

TTS_OUTPUT_FORMAT = "mp3_44100_128"
VOICE_SETTINGS = VoiceSettings(
    stability=0.5,
    similarity_boost=0.75,
    style=0.3,
    use_speaker_boost=True,
)


class ElevenLabsClient(AbstractSpeechClient):
    """Client for ElevenLabs text-to-speech and Scribe transcription.

    Uses the official ElevenLabs Python SDK with async support. ``http_client``
    replaces the SDK's own httpx client (connection reuse, test transports).
    """

    provider = "elevenlabs"

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = "https://api.elevenlabs.io",
        tts_model: str = "eleven_multilingual_v2",
        stt_model: str = "scribe_v1",
        timeout_seconds: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.tts_model = tts_model
        self.stt_model = stt_model
        self.client = AsyncElevenLabs(
            api_key=api_key,
            base_url=self.base_url,
            timeout=timeout_seconds,
            httpx_client=http_client,
        )

    def _provider_error(self, operation: str, exc: Exception) -> UpstreamAppError:
        if isinstance(exc, ApiError):
            logger.error(
                "speech.provider_error",
                extra={"operation": operation, "status_code": exc.status_code},
            )
            return UpstreamAppError(
                code="speech_provider_error",
                message=f"Speech service returned an error: {exc.status_code}",
                details={"provider": self.provider, "http_status": exc.status_code},
            )

        logger.error(
            "speech.request_failed",
            extra={"operation": operation, "error_type": type(exc).__name__},
        )
        return UpstreamAppError(
            code="speech_request_failed",
            message="Speech service is unavailable",
            details={"provider": self.provider},
        )

    async def synthesize(self, text: str, voice_id: str) -> bytes:
        start = time.perf_counter()
        chunks: list[bytes] = []
        try:
            async for chunk in self.client.text_to_speech.convert(
                voice_id,
                text=text,
                model_id=self.tts_model,
                output_format=TTS_OUTPUT_FORMAT,
                voice_settings=VOICE_SETTINGS,
            ):
                chunks.append(chunk)
        except (ApiError, httpx.HTTPError) as exc:
            raise self._provider_error("tts", exc) from exc

        audio = b"".join(chunks)
        logger.info(
            "speech.synthesized",
            extra={
                "model": self.tts_model,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                "audio_bytes": len(audio),
            },
        )
        return audio

    async def transcribe(
        self,
        audio: bytes,
        *,
        filename: str,
        content_type: str,
    ) -> dict[str, Any]:
        try:
            result = await self.client.speech_to_text.convert(
                file=(filename, audio, content_type),
                model_id=self.stt_model,
                language_code="eng",
                tag_audio_events=False,
                diarize=False,
                timestamps_granularity="word",
            )
        except (ApiError, httpx.HTTPError) as exc:
            raise self._provider_error("stt", exc) from exc

        payload = result.model_dump() if hasattr(result, "model_dump") else result
        if not isinstance(payload, dict):
            raise UpstreamAppError(
                code="speech_invalid_response",
                message="Speech service returned an invalid response",
                details={"provider": self.provider},
            )
        return payload
