"""Supabase bearer-token verifier.

Resolves the user behind an access token with the Supabase client library
(``auth.get_user(token)``), authenticated with the project's service role key.
"""

from __future__ import annotations

import asyncio
import logging

import httpx
from pydantic import ValidationError
from supabase import AsyncClient, AuthError, SupabaseException, acreate_client

from app.adapters.auth.base import ANONYMOUS, AbstractAuthVerifier, AuthResult
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)


class SupabaseAuthVerifier(AbstractAuthVerifier):
    """Verify Supabase JWTs through the async Supabase client.

    The client is created on first use and reused afterwards. Passing
    ``client`` skips creation (tests, shared clients).
    """

    def __init__(
        self,
        url: str,
        service_role_key: str,
        *,
        timeout_seconds: float = 10.0,
        client: AsyncClient | None = None,
    ) -> None:
        self.url = url.rstrip("/")
        self.service_role_key = service_role_key
        self.timeout_seconds = timeout_seconds
        self.client = client

    async def _get_client(self) -> AsyncClient:
        if self.client is None:
            self.client = await acreate_client(self.url, self.service_role_key)
        return self.client

    async def verify(self, token: str) -> AuthResult:
        """Resolve the user behind ``token``; failures degrade to anonymous."""
        try:
            client = await self._get_client()
            response = await asyncio.wait_for(
                client.auth.get_user(token), timeout=self.timeout_seconds
            )
        except AuthError as exc:
            logger.warning(
                "auth.token_rejected",
                extra={"status_code": getattr(exc, "status", None), "error_type": type(exc).__name__},
            )
            return ANONYMOUS
        except (SupabaseException, httpx.HTTPError, asyncio.TimeoutError, ValidationError) as exc:
            logger.error(
                "auth.verification_error",
                extra={"error_type": type(exc).__name__, "error_msg": str(exc)},
            )
            return ANONYMOUS

        user = response.user if response else None
        if user is None or not user.id:
            logger.warning("auth.token_rejected", extra={"reason": "no_user"})
            return ANONYMOUS

        logger.info("auth.verified", extra={"user_hash": hash_identifier(str(user.id))})
        return AuthResult(authenticated=True, user_id=str(user.id), email=user.email)
