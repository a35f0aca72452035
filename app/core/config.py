"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


class LLMSettings(BaseSettings):
    """Text-generation provider configuration.

    The API key is optional at startup: a missing key only fails the requests
    that actually need the provider.
    """

    provider: str = Field(
        "openai",
        description="LLM provider name (currently: openai)",
    )
    model: str = Field(
        "gpt-4o-mini",
        description="Model name (e.g., gpt-4o, gpt-4o-mini)",
    )
    api_key: str | None = Field(
        None,
        description="API key for the provider",
    )
    base_url: str | None = Field(
        None,
        description="Custom API endpoint (OpenAI-compatible gateways)",
    )
    timeout_seconds: float = Field(
        45.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        case_sensitive=False,
    )


class SpeechSettings(BaseSettings):
    """ElevenLabs speech-to-text / text-to-speech configuration."""

    api_key: str | None = Field(
        None,
        description="ElevenLabs API key (xi-api-key)",
    )
    base_url: str = Field(
        "https://api.elevenlabs.io",
        description="ElevenLabs API base URL",
    )
    tts_model: str = Field(
        "eleven_multilingual_v2",
        description="Model used for speech synthesis",
    )
    stt_model: str = Field(
        "scribe_v1",
        description="Model used for transcription",
    )
    timeout_seconds: float = Field(
        60.0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="ELEVENLABS_",
        case_sensitive=False,
    )


class AuthSettings(BaseSettings):
    """Supabase auth configuration used to resolve caller identity."""

    url: str | None = Field(
        None,
        description="Supabase project URL; when unset every caller is anonymous",
    )
    service_role_key: str | None = Field(
        None,
        description="Supabase service role key sent as apikey when verifying tokens",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Token verification timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="SUPABASE_",
        case_sensitive=False,
    )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log output: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file after this many bytes (0 disables rotation)",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to propagate the request correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Enable debug mode with verbose logging",
    )
    max_upload_size_mb: int = Field(
        10,
        description="Maximum audio upload size in megabytes",
        ge=1,
    )

    rate_limit_enabled: bool = Field(
        True,
        description="Enable per-caller rate limiting on guarded endpoints",
    )
    rate_limit_cleanup_interval_seconds: int = Field(
        60,
        description="Minimum interval between sweeps of expired rate limit entries",
        ge=1,
    )
    trusted_client_ip_header: str = Field(
        "cf-connecting-ip",
        description="Client IP header set by the trusted edge proxy",
    )

    cors_allow_origins: str = Field(
        "*",
        description="Comma-separated list of allowed origins",
    )
    cors_allow_headers: str = Field(
        "authorization, x-client-info, apikey, content-type",
        description="Comma-separated list of allowed request headers",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if settings are malformed.

    Environments:
    - development: Local development (DEBUG=true)
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (uses .env.production)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    speech: SpeechSettings = Field(default_factory=SpeechSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
