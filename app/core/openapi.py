"""OpenAPI customization utilities.

Enriches the generated schema with:
- an optional bearer (Supabase access token) security scheme
- tags metadata
- the 429 response shared by every rate-limited operation

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

_TAGS = [
    {"name": "Pitch", "description": "Pitch suggestions and script generation."},
    {"name": "Speech", "description": "Text-to-speech and transcription."},
    {"name": "Health", "description": "Liveness checks."},
]

_RATE_LIMITED_RESPONSE = {
    "description": "Rate limit exceeded. Retry after the number of seconds in Retry-After.",
    "headers": {
        "Retry-After": {"schema": {"type": "integer"}},
        "X-RateLimit-Remaining": {"schema": {"type": "string"}},
        "X-RateLimit-Reset": {"schema": {"type": "integer"}},
    },
    "content": {
        "application/json": {
            "schema": {
                "type": "object",
                "properties": {
                    "error": {"type": "string"},
                    "retryAfter": {"type": "integer"},
                },
            }
        }
    },
}


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation with auth, tags and 429 docs.

    Bearer auth is optional on every operation (``security`` lists an empty
    requirement next to it): anonymous callers are served with a stricter
    quota. Health endpoints carry no security and no 429.
    """

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        components = schema.setdefault("components", {})
        components.setdefault("securitySchemes", {}).setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "bearerFormat": "JWT",
                "description": "Optional Supabase access token; raises rate limits.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        tags.extend(t for t in _TAGS if t["name"] not in existing_tag_names)

        for path, methods in schema.get("paths", {}).items():
            for method_obj in methods.values():
                if not isinstance(method_obj, dict):
                    continue
                if path.endswith("/health"):
                    method_obj["security"] = []
                    continue
                method_obj["security"] = [{"BearerAuth": []}, {}]
                method_obj.setdefault("responses", {}).setdefault("429", _RATE_LIMITED_RESPONSE)

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
