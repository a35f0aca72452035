from __future__ import annotations

from app.api.routes.health import router as health_router
from app.api.routes.pitch import router as pitch_router
from app.api.routes.speech import router as speech_router

__all__ = ["health_router", "pitch_router", "speech_router"]
