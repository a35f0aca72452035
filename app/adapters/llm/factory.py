"""Factory pattern for creating LLM client instances."""

from app.adapters.llm.base import AbstractLLMClient
from app.adapters.llm.openai_client import OpenAIClient
from app.core.config import settings
from app.core.errors import ConfigurationAppError


def create_llm_client() -> AbstractLLMClient:
    """Instantiate the LLM client for the configured provider.

    Called per request, so a missing key fails only the requests that need
    text generation.

    Returns:
        AbstractLLMClient: Configured LLM client instance.

    Raises:
        ConfigurationAppError: If the provider is unknown or its API key is missing.
    """
    provider = settings.llm.provider.lower()

    if provider == "openai":
        if not settings.llm.api_key:
            raise ConfigurationAppError(
                code="llm_missing_api_key",
                message="Text generation is not configured",
                details={"setting": "LLM_API_KEY"},
            )
        return OpenAIClient(
            api_key=settings.llm.api_key,
            model=settings.llm.model,
            base_url=settings.llm.base_url,
            timeout_seconds=settings.llm.timeout_seconds,
        )

    raise ConfigurationAppError(
        code="llm_unknown_provider",
        message=f"Unknown LLM provider: '{provider}'. Supported providers: openai",
        details={"setting": "LLM_PROVIDER"},
    )
