from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class AuthResult:
    """Resolved caller identity.

    Attributes:
        authenticated: Whether the bearer token belongs to a known user.
        user_id: User id when authenticated.
        email: User email when authenticated.
        error: Reason for a failed verification, set only when auth is required.
    """

    authenticated: bool
    user_id: str | None = None
    email: str | None = None
    error: str | None = None


ANONYMOUS = AuthResult(authenticated=False)


class AbstractAuthVerifier(ABC):
    """Interface for bearer-token verifiers."""

    @abstractmethod
    async def verify(self, token: str) -> AuthResult:
        """Resolve the user behind ``token``.

        Implementations never raise: any failure yields ``authenticated=False``.
        """
        ...
