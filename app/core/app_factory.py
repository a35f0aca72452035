from __future__ import annotations

"""Application factory for the FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) to
keep main.py trivial and let tests build isolated app instances.
"""

from fastapi import FastAPI

from app.api.routes import health_router, pitch_router, speech_router
from app.core.config import settings
from app.core.cors import get_cors_middleware
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import apply_openapi_customizations


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Pitch Guard API",
        description=(
            "Backend for the pitch coaching app: generates pitch suggestions and "
            "scripts, synthesizes and transcribes speech. Every AI-backed endpoint "
            "is rate limited per client (stricter for anonymous callers) and "
            "screens free-text input for prompt injection before it reaches a model."
        ),
        version="0.1.0",
        debug=settings.app.debug,
    )

    # Middleware (last added runs first: CORS wraps request id)
    app.middleware("http")(request_id_middleware)
    cors_middleware, cors_options = get_cors_middleware()
    app.add_middleware(cors_middleware, **cors_options)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(pitch_router, prefix="/v1")
    app.include_router(speech_router, prefix="/v1")
    app.include_router(health_router)

    # OpenAPI customizations (security scheme, tags, 429 docs)
    apply_openapi_customizations(app)

    return app
