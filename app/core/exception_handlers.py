"""Global exception handlers for consistent error responses.

This module provides FastAPI exception handlers that intercept all errors
(domain and unexpected) and return consistent JSON responses with proper
HTTP status codes and traceability.

Design:
- RateLimitExceededError → 429 with Retry-After / X-RateLimit-* headers
- ValidationAppError → 400 with the validator's reason
- ConfigurationAppError / UpstreamAppError → 500
- Unexpected Exception → generic 500 (safety net)
- All JSON error bodies except the 429 include request_id for tracing
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from app.adapters.rate_limit.base import RateLimitResult
from app.core.cors import get_cors_headers
from app.core.errors import (
    AppError,
    ConfigurationAppError,
    RateLimitExceededError,
    UpstreamAppError,
)
from app.core.logging import get_request_id
from app.core.rate_limit import DEFAULT_RETRY_AFTER_SECONDS, build_rejection_response

logger = logging.getLogger(__name__)


def _status_code_for(exc: AppError) -> int:
    if isinstance(exc, (ConfigurationAppError, UpstreamAppError)):
        return 500
    return 400


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Body shape:
    - error.code: Machine-readable error code
    - error.message: Human-readable message
    - error.request_id: For distributed tracing
    - error.details: Optional structured context

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with appropriate status code and error details.
    """
    status_code = _status_code_for(exc)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_path": request.url.path,
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(
        status_code=status_code,
        content={"error": error_content},
    )


async def rate_limit_error_handler(request: Request, exc: RateLimitExceededError) -> JSONResponse:
    """Turn a rejected limiter result into the 429 response."""
    result = exc.result or RateLimitResult(
        allowed=False,
        remaining=0,
        reset_at=0,
        retry_after=DEFAULT_RETRY_AFTER_SECONDS,
    )
    return build_rejection_response(result, get_cors_headers(request.headers.get("origin")))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    Logs the failure for debugging while returning a generic message, so no
    implementation details reach the client.

    Args:
        request: FastAPI request object.
        exc: Exception instance (unexpected).

    Returns:
        JSONResponse with generic error (no implementation details leaked).
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with FastAPI app.

    Starlette resolves handlers along the exception's MRO, so the rate limit
    handler wins over the generic AppError one.

    Args:
        app: FastAPI application instance.
    """
    app.exception_handler(RateLimitExceededError)(rate_limit_error_handler)
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
