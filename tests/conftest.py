"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It pins APP_ENV to "testing" and clears provider credentials so a local
.env or shell environment cannot leak into the settings under test.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

for _name in (
    "LLM_API_KEY",
    "ELEVENLABS_API_KEY",
    "SUPABASE_URL",
    "SUPABASE_SERVICE_ROLE_KEY",
    "APP_RATE_LIMIT_ENABLED",
):
    os.environ.pop(_name, None)

os.environ.setdefault("LLM_PROVIDER", "openai")
os.environ.setdefault("LLM_MODEL", "gpt-4o-mini")

import pytest

from app.core.rate_limit import reset_rate_limiter


@pytest.fixture(autouse=True)
def fresh_rate_limiter():
    """Give every test an empty process-wide limiter."""
    reset_rate_limiter()
    yield
    reset_rate_limiter()
