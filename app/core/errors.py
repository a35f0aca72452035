"""Application-level exception types.

This module defines domain errors raised by routes and adapters, enabling
consistent error handling, logging, and API responses.

The rate limiter and input validator never raise; routes translate their
result values into these errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict

from app.adapters.rate_limit.base import RateLimitResult


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients.

    Fields are optional to keep backward compatibility while encouraging
    consistent shapes across the codebase.
    """

    code: str
    message: str
    hint: str
    field: str
    http_status: int
    provider: str
    setting: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when user-supplied input is rejected."""


class ConfigurationAppError(AppError):
    """Raised when a downstream collaborator is not configured (e.g., API key)."""


class UpstreamAppError(AppError):
    """Raised when an LLM or speech provider call fails."""


@dataclass
class RateLimitExceededError(AppError):
    """Raised by the rate limit dependency when a request is rejected.

    Attributes:
        result: Rejected limiter result, used to build the 429 response.
    """

    result: RateLimitResult | None = None
