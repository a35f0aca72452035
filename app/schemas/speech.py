"""Pydantic schemas for speech endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TextToSpeechRequest(BaseModel):
    """Body of a text-to-speech request.

    Fields are left untyped so the validators own the error messages.
    """

    model_config = ConfigDict(populate_by_name=True)

    text: Any = Field(default=None, description="Text to speak (max 5000 chars).")
    voice_id: Any = Field(
        default=None,
        alias="voiceId",
        description="ElevenLabs voice id; the default voice is used when omitted.",
    )
