"""Rate limiting for FastAPI routes.

This module wires the rate limiting adapter into the HTTP layer.

Design goals:
- Minimal coupling: routes depend on a dependency factory only.
- Swap-friendly: the store behind the limiter can be replaced (e.g., Redis)
  behind an abstract interface.
- Tiered: signed-in callers get a more generous quota than anonymous ones,
  since anonymous traffic is the main abuse vector for costly upstream calls.

Rate limiting strategy:
- Fixed window per (feature prefix, auth tier, client IP).
- Client IP comes from the trusted edge header, then X-Real-IP, then the
  first X-Forwarded-For hop; callers without any of them share "unknown".
- Limits are per process: N instances admit up to N times the quota.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Awaitable, Callable, Mapping

from fastapi import Depends, Request
from fastapi.responses import JSONResponse

from app.adapters.auth.base import AuthResult
from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitPolicy, RateLimitResult
from app.adapters.rate_limit.in_memory import FixedWindowRateLimiter
from app.core.auth import get_auth_status
from app.core.config import settings
from app.core.errors import RateLimitExceededError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"
RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please try again later."
DEFAULT_RETRY_AFTER_SECONDS = 60

_MINUTE_MS = 60 * 1000


class RateLimitCategory(str, Enum):
    """Request categories with their own quotas."""

    AI_GENERATION = "aiGeneration"
    SPEECH = "speech"
    ANALYTICS = "analytics"
    DOCUMENT_PARSING = "documentParsing"
    INTERROGATION = "interrogation"


@dataclass(frozen=True)
class TieredPolicy:
    anonymous: RateLimitPolicy
    authenticated: RateLimitPolicy


RATE_LIMIT_POLICIES: dict[RateLimitCategory, TieredPolicy] = {
    RateLimitCategory.AI_GENERATION: TieredPolicy(
        anonymous=RateLimitPolicy(max_requests=30, window_ms=_MINUTE_MS),
        authenticated=RateLimitPolicy(max_requests=60, window_ms=_MINUTE_MS),
    ),
    RateLimitCategory.SPEECH: TieredPolicy(
        anonymous=RateLimitPolicy(max_requests=3, window_ms=_MINUTE_MS),
        authenticated=RateLimitPolicy(max_requests=40, window_ms=_MINUTE_MS),
    ),
    RateLimitCategory.ANALYTICS: TieredPolicy(
        anonymous=RateLimitPolicy(max_requests=60, window_ms=_MINUTE_MS),
        authenticated=RateLimitPolicy(max_requests=120, window_ms=_MINUTE_MS),
    ),
    RateLimitCategory.DOCUMENT_PARSING: TieredPolicy(
        anonymous=RateLimitPolicy(max_requests=10, window_ms=_MINUTE_MS),
        authenticated=RateLimitPolicy(max_requests=30, window_ms=_MINUTE_MS),
    ),
    RateLimitCategory.INTERROGATION: TieredPolicy(
        anonymous=RateLimitPolicy(max_requests=5, window_ms=_MINUTE_MS),
        authenticated=RateLimitPolicy(max_requests=40, window_ms=_MINUTE_MS),
    ),
}


def select_policy(category: RateLimitCategory, is_authenticated: bool) -> RateLimitPolicy:
    """Return the quota for a category and caller tier."""

    tiers = RATE_LIMIT_POLICIES[RateLimitCategory(category)]
    return tiers.authenticated if is_authenticated else tiers.anonymous


_limiter: AbstractRateLimiter | None = None


def get_rate_limiter() -> AbstractRateLimiter:
    """Return the process-wide rate limiter instance.

    The instance is cached in-module to preserve state across requests.
    """

    global _limiter

    if _limiter is None:
        _limiter = FixedWindowRateLimiter(
            cleanup_interval_seconds=settings.app.rate_limit_cleanup_interval_seconds,
        )
    return _limiter


def reset_rate_limiter(limiter: AbstractRateLimiter | None = None) -> None:
    """Replace (or drop) the process-wide limiter. Used by tests."""

    global _limiter
    _limiter = limiter


def _client_ip(headers: Mapping[str, str]) -> str:
    trusted = headers.get(settings.app.trusted_client_ip_header)
    if trusted and trusted.strip():
        return trusted.strip()

    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    return UNKNOWN_CLIENT


def derive_rate_limit_key(request: Request, prefix: str = "") -> str:
    """Build the limiter key for the current request.

    Args:
        request: Incoming request; only its headers are read.
        prefix: Feature and tier namespace, so one caller gets independent
            quotas per feature.

    Returns:
        str: ``"{prefix}:{client_ip}"``.
    """

    return f"{prefix}:{_client_ip(request.headers)}"


def build_rejection_response(result: RateLimitResult, cors_headers: Mapping[str, str]) -> JSONResponse:
    """Build the 429 response for a rejected request.

    Args:
        result: Rejected limiter result.
        cors_headers: CORS headers merged into the response.

    Returns:
        JSONResponse with ``{"error", "retryAfter"}`` and backoff headers.
    """

    retry_after = result.retry_after or DEFAULT_RETRY_AFTER_SECONDS
    headers = {
        **cors_headers,
        "Retry-After": str(retry_after),
        "X-RateLimit-Remaining": "0",
        "X-RateLimit-Reset": str(math.ceil(result.reset_at / 1000)),
    }
    return JSONResponse(
        status_code=429,
        content={"error": RATE_LIMIT_MESSAGE, "retryAfter": result.retry_after},
        headers=headers,
    )


def enforce_rate_limit(
    category: RateLimitCategory,
    prefix: str,
) -> Callable[..., Awaitable[RateLimitResult | None]]:
    """Create a FastAPI dependency enforcing the quota of ``category``.

    Usage:
        @router.post("/tts", dependencies=[Depends(enforce_rate_limit(RateLimitCategory.SPEECH, "elevenlabs-tts"))])

    Args:
        category: Policy category for the guarded endpoint.
        prefix: Key namespace for the endpoint.

    Returns:
        Async dependency that consumes one request from the caller's budget
        and raises RateLimitExceededError when the budget is exhausted.
    """

    async def dependency(
        request: Request,
        auth: Annotated[AuthResult, Depends(get_auth_status)],
    ) -> RateLimitResult | None:
        if not settings.app.rate_limit_enabled:
            return None

        tier = "auth" if auth.authenticated else "anon"
        key = derive_rate_limit_key(request, f"{prefix}:{tier}")
        policy = select_policy(category, auth.authenticated)

        result = get_rate_limiter().check_and_admit(key, policy)

        log_extra = {
            "category": category.value,
            "tier": tier,
            "key_hash": hash_identifier(key),
            "limit": policy.max_requests,
            "window_ms": policy.window_ms,
            "remaining": result.remaining,
        }
        if result.allowed:
            logger.debug("rate_limit.allowed", extra=log_extra)
            return result

        logger.warning(
            "rate_limit.exceeded",
            extra={**log_extra, "retry_after_s": result.retry_after},
        )
        raise RateLimitExceededError(
            code="rate_limit_exceeded",
            message=RATE_LIMIT_MESSAGE,
            result=result,
        )

    return dependency
