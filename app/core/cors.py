"""CORS configuration for browser clients.

The same origin/header settings drive both the middleware applied to every
response and the header set merged into responses built by hand
(e.g., the 429 rejection).
"""

from __future__ import annotations

from typing import Any

from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def get_cors_headers(origin: str | None = None) -> dict[str, str]:
    """CORS headers for manually constructed responses.

    With a wildcard configuration the origin is ``*``. Otherwise the request's
    ``Origin`` is echoed back only when it is allowed, and omitted when not.
    """

    origins = _split_csv(settings.app.cors_allow_origins)
    headers = {
        "Access-Control-Allow-Headers": ", ".join(_split_csv(settings.app.cors_allow_headers)),
    }
    if "*" in origins or not origins:
        headers["Access-Control-Allow-Origin"] = "*"
    else:
        headers["Vary"] = "Origin"
        if origin in origins:
            headers["Access-Control-Allow-Origin"] = origin
    return headers


def get_cors_middleware() -> tuple[type[CORSMiddleware], dict[str, Any]]:
    """Return the CORS middleware class and its keyword arguments.

    Usage:
        middleware_class, options = get_cors_middleware()
        app.add_middleware(middleware_class, **options)
    """

    origins = _split_csv(settings.app.cors_allow_origins) or ["*"]
    return CORSMiddleware, {
        "allow_origins": origins,
        "allow_credentials": "*" not in origins,
        "allow_methods": ["GET", "POST", "OPTIONS"],
        "allow_headers": _split_csv(settings.app.cors_allow_headers),
        "expose_headers": [
            settings.log.request_id_header,
            "Retry-After",
            "X-RateLimit-Remaining",
            "X-RateLimit-Reset",
        ],
        "max_age": 600,
    }
