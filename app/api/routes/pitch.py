from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from app.adapters.auth.base import AuthResult
from app.adapters.llm.factory import create_llm_client
from app.core.auth import get_auth_status
from app.core.errors import ValidationAppError
from app.core.input_validation import (
    raise_for_invalid,
    validate_context,
    validate_duration,
    validate_idea,
    validate_track,
    validate_type,
)
from app.core.rate_limit import RateLimitCategory, enforce_rate_limit
from app.schemas.pitch import (
    GeneratePitchRequest,
    GeneratePitchResponse,
    GenerateScriptRequest,
    GenerateScriptResponse,
)
from app.services.pitch_service import ALLOWED_GENERATION_TYPES, HOOK_STYLES, PitchService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pitch"])


def get_pitch_service() -> PitchService:
    """Build the pitch service; fails with ConfigurationAppError without an LLM key."""
    return PitchService(llm=create_llm_client())


@router.post(
    "/pitch/generate",
    response_model=GeneratePitchResponse,
    dependencies=[Depends(enforce_rate_limit(RateLimitCategory.AI_GENERATION, "generate-pitch"))],
)
async def generate_pitch(
    body: GeneratePitchRequest,
    auth: Annotated[AuthResult, Depends(get_auth_status)],
) -> GeneratePitchResponse:
    """Generate suggestions for one wizard step from the user's idea.

    Raises:
        ValidationAppError: 400 when type, idea or context is rejected.
        ConfigurationAppError: 500 when text generation is not configured.
        UpstreamAppError: 500 when the LLM call fails.
    """
    type_result = validate_type(body.type, ALLOWED_GENERATION_TYPES)
    raise_for_invalid(type_result, "type")

    idea_result = validate_idea(body.idea)
    raise_for_invalid(idea_result, "idea")

    context_result = validate_context(body.context)
    raise_for_invalid(context_result, "context")

    logger.info(
        "pitch.request",
        extra={
            "endpoint": "generate-pitch",
            "generation_type": type_result.sanitized,
            "authenticated": auth.authenticated,
        },
    )

    service = get_pitch_service()
    result = await service.generate_suggestions(
        type_result.sanitized,
        idea_result.sanitized,
        context_result.sanitized or {},
    )
    return GeneratePitchResponse(type=type_result.sanitized, result=result)


@router.post(
    "/pitch/script",
    response_model=GenerateScriptResponse,
    dependencies=[Depends(enforce_rate_limit(RateLimitCategory.AI_GENERATION, "generate-speech"))],
)
async def generate_script(
    body: GenerateScriptRequest,
    auth: Annotated[AuthResult, Depends(get_auth_status)],
) -> GenerateScriptResponse:
    """Generate a full pitch script for a track and duration.

    Raises:
        ValidationAppError: 400 when track, duration, inputs or hookStyle is rejected.
        ConfigurationAppError: 500 when text generation is not configured.
        UpstreamAppError: 500 when the LLM call fails.
    """
    track_result = validate_track(body.track)
    raise_for_invalid(track_result, "track")

    duration_result = validate_duration(body.duration)
    raise_for_invalid(duration_result, "duration")

    inputs_result = validate_context(body.inputs)
    raise_for_invalid(inputs_result, "inputs")

    hook_style = body.hook_style or "auto"
    if hook_style != "auto" and hook_style not in HOOK_STYLES:
        raise ValidationAppError(
            code="invalid_input",
            message=f"Invalid hook style: {hook_style}",
            details={"field": "hookStyle"},
        )

    logger.info(
        "pitch.request",
        extra={
            "endpoint": "generate-speech",
            "track": track_result.sanitized,
            "duration_minutes": duration_result.value,
            "authenticated": auth.authenticated,
        },
    )

    service = get_pitch_service()
    script = await service.generate_script(
        track_result.sanitized,
        duration_result.value,
        inputs_result.sanitized or {},
        hook_style=hook_style,
        has_demo=body.has_demo is True,
    )
    return GenerateScriptResponse(
        track=track_result.sanitized,
        duration=duration_result.value,
        hook_style=script.pop("hook_style"),
        target_word_count=script.pop("target_word_count"),
        script=script,
    )
