from __future__ import annotations

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response

from app.adapters.auth.base import AuthResult
from app.adapters.speech.factory import create_speech_client
from app.core.auth import get_auth_status
from app.core.errors import ValidationAppError
from app.core.file_validation import is_allowed_audio_type, read_upload_file_limited
from app.core.input_validation import raise_for_invalid, validate_tts_text, validate_voice_id
from app.core.rate_limit import RateLimitCategory, enforce_rate_limit
from app.schemas.speech import TextToSpeechRequest

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Speech"])


@router.post(
    "/speech/tts",
    response_class=Response,
    responses={200: {"content": {"audio/mpeg": {}}}},
    dependencies=[Depends(enforce_rate_limit(RateLimitCategory.SPEECH, "elevenlabs-tts"))],
)
async def text_to_speech(
    body: TextToSpeechRequest,
    auth: Annotated[AuthResult, Depends(get_auth_status)],
) -> Response:
    """Synthesize speech for a pitch script and return MP3 audio.

    Raises:
        ValidationAppError: 400 when text or voiceId is rejected.
        ConfigurationAppError: 500 when the speech service is not configured.
        UpstreamAppError: 500 when the provider call fails.
    """
    text_result = validate_tts_text(body.text)
    raise_for_invalid(text_result, "text")

    voice_result = validate_voice_id(body.voice_id)
    raise_for_invalid(voice_result, "voiceId")

    client = create_speech_client()
    audio = await client.synthesize(text_result.sanitized, voice_result.sanitized)

    logger.info(
        "speech.tts_completed",
        extra={
            "text_chars": len(text_result.sanitized),
            "voice_id": voice_result.sanitized,
            "audio_bytes": len(audio),
            "authenticated": auth.authenticated,
        },
    )
    return Response(content=audio, media_type="audio/mpeg")


@router.post(
    "/speech/stt",
    dependencies=[Depends(enforce_rate_limit(RateLimitCategory.SPEECH, "elevenlabs-stt"))],
)
async def speech_to_text(
    auth: Annotated[AuthResult, Depends(get_auth_status)],
    audio: UploadFile | None = File(default=None, description="Recorded audio (max 10MB)."),
) -> dict[str, Any]:
    """Transcribe a recorded pitch.

    Raises:
        ValidationAppError: 400 when no audio file is sent.
        HTTPException: 413 when the file exceeds the upload limit.
        ConfigurationAppError: 500 when the speech service is not configured.
        UpstreamAppError: 500 when the provider call fails.
    """
    if audio is None:
        raise ValidationAppError(
            code="invalid_input",
            message="Audio file is required",
            details={"field": "audio"},
        )

    content_type = (audio.content_type or "").lower()
    if not is_allowed_audio_type(content_type):
        logger.warning("speech.unexpected_audio_type", extra={"content_type": content_type})

    client = create_speech_client()
    audio_bytes = await read_upload_file_limited(audio)

    logger.info(
        "speech.stt_started",
        extra={
            "file_size": len(audio_bytes),
            "content_type": content_type,
            "authenticated": auth.authenticated,
        },
    )
    transcription = await client.transcribe(
        audio_bytes,
        filename=audio.filename or "recording.webm",
        content_type=content_type or "application/octet-stream",
    )
    return transcription
