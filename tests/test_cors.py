"""Tests for the CORS headers attached to hand-built responses."""

import pytest

from app.core.config import settings
from app.core.cors import get_cors_headers


@pytest.fixture
def allow_two_origins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        settings.app, "cors_allow_origins", "https://app.example.com, https://admin.example.com"
    )


def test_wildcard_origin_by_default(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings.app, "cors_allow_origins", "*")

    headers = get_cors_headers("https://anywhere.example.org")

    assert headers["Access-Control-Allow-Origin"] == "*"
    assert "Vary" not in headers


@pytest.mark.parametrize("origin", ["https://app.example.com", "https://admin.example.com"])
def test_allowed_origin_is_echoed(allow_two_origins, origin: str):
    headers = get_cors_headers(origin)

    assert headers["Access-Control-Allow-Origin"] == origin
    assert headers["Vary"] == "Origin"


@pytest.mark.parametrize("origin", ["https://evil.example.net", None])
def test_unlisted_origin_gets_no_allow_origin(allow_two_origins, origin):
    headers = get_cors_headers(origin)

    assert "Access-Control-Allow-Origin" not in headers
    assert headers["Vary"] == "Origin"
