"""Caller authentication status.

Guarded endpoints accept both anonymous and signed-in callers; the auth
status only selects the rate-limit tier and is attached to logs. Tokens are
Supabase access tokens sent as ``Authorization: Bearer <token>``.

Design principles:
- Non-blocking: a missing, malformed or rejected token means "anonymous",
  never an error, unless the caller explicitly requires auth
- Dependency Injection: used via FastAPI Depends() for loose coupling
- Configuration-driven: without Supabase settings every caller is anonymous
"""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Header

from app.adapters.auth.base import ANONYMOUS, AbstractAuthVerifier, AuthResult
from app.adapters.auth.supabase_client import SupabaseAuthVerifier
from app.core.config import settings

logger = logging.getLogger(__name__)

_verifier: AbstractAuthVerifier | None = None
_verifier_config: tuple[str | None, str | None] | None = None


def get_auth_verifier() -> AbstractAuthVerifier | None:
    """Return the process-wide token verifier, or None when auth is unconfigured.

    If configuration changes (primarily in tests), the verifier is rebuilt.
    """

    global _verifier, _verifier_config

    config = (settings.auth.url, settings.auth.service_role_key)
    if not all(config):
        return None

    if _verifier is None or _verifier_config != config:
        _verifier = SupabaseAuthVerifier(
            url=settings.auth.url,  # type: ignore[arg-type]
            service_role_key=settings.auth.service_role_key,  # type: ignore[arg-type]
            timeout_seconds=settings.auth.timeout_seconds,
        )
        _verifier_config = config

    return _verifier


def extract_bearer_token(authorization: str | None) -> str | None:
    """Pull the token out of an Authorization header value.

    Examples:
        >>> extract_bearer_token("Bearer abc.def")
        'abc.def'
        >>> extract_bearer_token("Bearer ") is None
        True
        >>> extract_bearer_token(None) is None
        True
    """
    if not authorization:
        return None

    token = authorization.replace("Bearer ", "", 1).strip()
    return token or None


async def validate_auth(authorization: str | None, *, required: bool = False) -> AuthResult:
    """Resolve the caller behind an Authorization header.

    Args:
        authorization: Raw Authorization header value.
        required: Attach an error message when the caller is not authenticated.

    Returns:
        AuthResult; ``error`` is only populated when ``required`` is true.
    """
    if not authorization:
        return AuthResult(authenticated=False, error="Authorization header required" if required else None)

    token = extract_bearer_token(authorization)
    if token is None:
        return AuthResult(
            authenticated=False,
            error="Invalid authorization token format" if required else None,
        )

    verifier = get_auth_verifier()
    if verifier is None:
        logger.debug("auth.skipped", extra={"reason": "supabase_not_configured"})
        return AuthResult(
            authenticated=False,
            error="Authentication is not configured" if required else None,
        )

    result = await verifier.verify(token)
    if not result.authenticated and required:
        return AuthResult(authenticated=False, error="Invalid or expired token")
    return result


async def get_auth_status(
    authorization: Annotated[str | None, Header()] = None,
) -> AuthResult:
    """FastAPI dependency resolving the (optional) caller identity.

    Usage:
        @router.post("/generate")
        async def generate(auth: Annotated[AuthResult, Depends(get_auth_status)]):
            ...
    """
    if not authorization:
        return ANONYMOUS
    return await validate_auth(authorization, required=False)
