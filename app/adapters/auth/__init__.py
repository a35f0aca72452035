"""Caller identity adapters."""

from app.adapters.auth.base import ANONYMOUS, AbstractAuthVerifier, AuthResult
from app.adapters.auth.supabase_client import SupabaseAuthVerifier

__all__ = [
    "ANONYMOUS",
    "AbstractAuthVerifier",
    "AuthResult",
    "SupabaseAuthVerifier",
]
