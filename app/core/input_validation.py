"""Validation and sanitization of user-supplied text.

Free-text fields are cleaned (control characters stripped, whitespace
trimmed), bounded in length, and screened for prompt-injection phrasing before
they are interpolated into a prompt.

Checks run fail-fast and cheapest first: type, presence, cleaning, length,
then the injection patterns. Validators return result objects instead of
raising; routes decide how to surface a rejection.

The injection screen is a denylist of known phrasings. It catches the common
imperative forms ("ignore previous instructions", "reveal your system
prompt") and will miss novel wording.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Iterable

from app.core.errors import ValidationAppError
from app.core.logging import truncate_for_log

logger = logging.getLogger(__name__)

MAX_INPUT_LENGTH = 2000
MAX_IDEA_LENGTH = 500
MAX_CONTEXT_KEY_LENGTH = 50
MAX_CONTEXT_VALUE_LENGTH = 1000
MAX_TTS_TEXT_LENGTH = 5000
MIN_DURATION_MINUTES = 1
MAX_DURATION_MINUTES = 30
DEFAULT_VOICE_ID = "JBFqnCBsd6RMkjVDRZzb"

ALLOWED_TRACKS = (
    "hackathon-no-demo",
    "hackathon-with-demo",
    "investor",
    "academic",
    "grandma",
    "peers",
)

INJECTION_DETECTED_MESSAGE = "Invalid input detected"
ARRAY_ITEM_TYPE_MESSAGE = "Array items must be strings, numbers or booleans"

# C0 controls and DEL, keeping \t \n \r
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_VOICE_ID_RE = re.compile(r"^[a-zA-Z0-9]{10,30}$")

INJECTION_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(pattern, re.IGNORECASE)
    for pattern in (
        r"ignore\s+(all\s+)?(previous|above|prior)\s+(instructions|prompts?)",
        r"disregard\s+(all\s+)?(previous|above|prior)\s+(instructions|prompts?)",
        r"forget\s+(all\s+)?(previous|above|prior)\s+(instructions|prompts?)",
        r"reveal\s+(your\s+)?(system\s+)?prompt",
        r"show\s+(your\s+)?(system\s+)?prompt",
        r"what\s+(are|is)\s+your\s+(system\s+)?(prompt|instructions)",
        r"act\s+as\s+(a\s+)?different",
        r"pretend\s+(to\s+be|you\s+are)",
        r"you\s+are\s+now\s+(a|an)",
        r"from\s+now\s+on\s+(you|ignore)",
        r"system:\s",
        r"\[\s*system\s*\]",
        r"<\s*system\s*>",
        r"###\s*(instruction|system|prompt)",
    )
)


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one text field.

    Attributes:
        is_valid: Whether the value was accepted.
        error: User-facing reason when rejected.
        sanitized: Cleaned value when accepted.
    """

    is_valid: bool
    error: str | None = None
    sanitized: str | None = None


@dataclass(frozen=True)
class DurationValidationResult:
    is_valid: bool
    error: str | None = None
    value: int | None = None


@dataclass(frozen=True)
class ContextValidationResult:
    is_valid: bool
    error: str | None = None
    sanitized: dict[str, Any] | None = None


def _reject(error: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error=error)


def clean_text(value: str) -> str:
    """Strip control characters (tabs and newlines survive) and trim."""

    return _CONTROL_CHARS_RE.sub("", value).strip()


def find_injection_pattern(value: str) -> re.Pattern[str] | None:
    """Return the first injection pattern matching ``value``, if any."""

    for pattern in INJECTION_PATTERNS:
        if pattern.search(value):
            return pattern
    return None


def sanitize_input(
    value: Any,
    *,
    max_length: int = MAX_INPUT_LENGTH,
    allow_empty: bool = False,
    check_injection: bool = True,
) -> ValidationResult:
    """Sanitize and validate a free-text value bound for a prompt.

    Args:
        value: Raw value from the request body.
        max_length: Maximum length of the cleaned string.
        allow_empty: Accept missing or blank values as ``""``.
        check_injection: Screen the cleaned value against INJECTION_PATTERNS.

    Returns:
        ValidationResult with the cleaned string or a rejection reason. The
        injection rejection is deliberately generic; the matched sample is
        only logged.
    """
    if value is None:
        if allow_empty:
            return ValidationResult(is_valid=True, sanitized="")
        return _reject("Input is required")

    if not isinstance(value, str):
        return _reject("Input must be a string")

    cleaned = clean_text(value)

    if not cleaned and not allow_empty:
        return _reject("Input cannot be empty")

    if len(cleaned) > max_length:
        return _reject(f"Input exceeds maximum length of {max_length} characters")

    if check_injection:
        pattern = find_injection_pattern(cleaned)
        if pattern is not None:
            logger.warning(
                "input_validation.injection_detected",
                extra={
                    "sample": truncate_for_log(cleaned),
                    "pattern": pattern.pattern,
                },
            )
            return _reject(INJECTION_DETECTED_MESSAGE)

    return ValidationResult(is_valid=True, sanitized=cleaned)


def validate_idea(idea: Any) -> ValidationResult:
    """Validate the pitch idea field."""
    return sanitize_input(idea, max_length=MAX_IDEA_LENGTH, allow_empty=False, check_injection=True)


def validate_type(value: Any, allowed_types: Iterable[str]) -> ValidationResult:
    """Validate a generation type against an allow-list."""
    if not isinstance(value, str):
        return _reject("Type must be a string")

    if value not in set(allowed_types):
        return _reject(f"Invalid type: {value}")

    return ValidationResult(is_valid=True, sanitized=value)


def validate_track(track: Any) -> ValidationResult:
    """Validate the pitch track (audience) identifier."""
    if not isinstance(track, str):
        return _reject("Track must be a string")

    if track not in ALLOWED_TRACKS:
        return _reject(f"Invalid track: {track}")

    return ValidationResult(is_valid=True, sanitized=track)


def validate_duration(duration: Any) -> DurationValidationResult:
    """Validate a speech duration in minutes.

    Booleans and non-finite floats are not durations. Accepted values are
    rounded half-up to whole minutes.
    """
    if isinstance(duration, bool) or not isinstance(duration, (int, float)):
        return DurationValidationResult(is_valid=False, error="Duration must be a number")

    # ints beyond float range overflow math.isfinite
    if isinstance(duration, float) and not math.isfinite(duration):
        return DurationValidationResult(is_valid=False, error="Duration must be a number")

    if duration < MIN_DURATION_MINUTES or duration > MAX_DURATION_MINUTES:
        return DurationValidationResult(
            is_valid=False,
            error=f"Duration must be between {MIN_DURATION_MINUTES} and {MAX_DURATION_MINUTES} minutes",
        )

    return DurationValidationResult(is_valid=True, value=math.floor(duration + 0.5))


def validate_tts_text(text: Any) -> ValidationResult:
    """Validate text for speech synthesis.

    The text is spoken, never fed back into a prompt, so only cleaning and
    length limits apply.
    """
    if not isinstance(text, str):
        return _reject("Text must be a string")

    cleaned = clean_text(text)
    if not cleaned:
        return _reject("Text cannot be empty")

    if len(cleaned) > MAX_TTS_TEXT_LENGTH:
        return _reject(f"Text exceeds maximum length of {MAX_TTS_TEXT_LENGTH} characters")

    return ValidationResult(is_valid=True, sanitized=cleaned)


def validate_voice_id(voice_id: Any) -> ValidationResult:
    """Validate an ElevenLabs voice id, falling back to the default voice."""
    if voice_id is None:
        return ValidationResult(is_valid=True, sanitized=DEFAULT_VOICE_ID)

    if not isinstance(voice_id, str):
        return _reject("Voice ID must be a string")

    if not _VOICE_ID_RE.match(voice_id):
        return _reject("Invalid voice ID format")

    return ValidationResult(is_valid=True, sanitized=voice_id)


def _sanitize_context_string(value: str) -> ValidationResult:
    return sanitize_input(
        value,
        max_length=MAX_CONTEXT_VALUE_LENGTH,
        allow_empty=True,
        check_injection=True,
    )


def validate_context(context: Any, *, _depth: int = 0) -> ContextValidationResult:
    """Validate a context object whose values end up in a prompt.

    Strings (directly or inside lists) go through :func:`sanitize_input`,
    numbers and booleans pass through, ``None`` values are dropped. List items
    must be scalars; objects or lists inside a list are rejected. Nested
    objects are validated one level further; anything deeper is rejected.

    Args:
        context: Raw context mapping from the request body.

    Returns:
        ContextValidationResult with a sanitized copy of the mapping.
    """
    if context is None:
        return ContextValidationResult(is_valid=True, sanitized={})

    if not isinstance(context, dict):
        return ContextValidationResult(is_valid=False, error="Context must be an object")

    sanitized: dict[str, Any] = {}

    for key, value in context.items():
        key_result = sanitize_input(key, max_length=MAX_CONTEXT_KEY_LENGTH, check_injection=False)
        if not key_result.is_valid:
            return ContextValidationResult(is_valid=False, error=f"Invalid context key: {key}")

        if isinstance(value, str):
            value_result = _sanitize_context_string(value)
            if not value_result.is_valid:
                return ContextValidationResult(
                    is_valid=False,
                    error=f"Invalid context value for {key}: {value_result.error}",
                )
            sanitized[key] = value_result.sanitized

        elif isinstance(value, list):
            items: list[str] = []
            for item in value:
                if isinstance(item, str):
                    item_result = _sanitize_context_string(item)
                    if not item_result.is_valid:
                        return ContextValidationResult(
                            is_valid=False,
                            error=f"Invalid array item in {key}: {item_result.error}",
                        )
                    items.append(item_result.sanitized or "")
                elif isinstance(item, (bool, int, float)):
                    items.append(str(item))
                elif item is not None:
                    return ContextValidationResult(
                        is_valid=False,
                        error=f"Invalid array item in {key}: {ARRAY_ITEM_TYPE_MESSAGE}",
                    )
            sanitized[key] = items

        elif isinstance(value, (bool, int, float)):
            sanitized[key] = value

        elif isinstance(value, dict):
            if _depth >= 1:
                return ContextValidationResult(
                    is_valid=False,
                    error=f"Context value for {key} is nested too deeply",
                )
            nested = validate_context(value, _depth=_depth + 1)
            if not nested.is_valid:
                return nested
            sanitized[key] = nested.sanitized

    return ContextValidationResult(is_valid=True, sanitized=sanitized)


def raise_for_invalid(
    result: ValidationResult | DurationValidationResult | ContextValidationResult,
    field: str,
) -> None:
    """Translate a rejected result into a ValidationAppError (HTTP 400).

    Routes call this right after each validator.

    Raises:
        ValidationAppError: If ``result`` is not valid.
    """
    if result.is_valid:
        return

    code = "invalid_input_detected" if result.error == INJECTION_DETECTED_MESSAGE else "invalid_input"
    raise ValidationAppError(
        code=code,
        message=result.error or "Invalid input",
        details={"field": field},
    )
