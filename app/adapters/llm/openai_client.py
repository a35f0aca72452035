"""OpenAI chat-completions adapter in JSON mode."""

import json
import logging
import time
from typing import Any

from openai import AsyncOpenAI, OpenAIError

from app.adapters.llm.base import AbstractLLMClient
from app.core.errors import UpstreamAppError

logger = logging.getLogger(__name__)

JSON_ONLY_INSTRUCTION = "Output JSON only. No extra text or markdown formatting."


class OpenAIClient(AbstractLLMClient):
    """Client for OpenAI chat completions in JSON mode.

    Uses the official OpenAI Python SDK with async support. ``base_url``
    allows OpenAI-compatible gateways.
    """

    provider = "openai"

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str | None = None,
        timeout_seconds: float = 45.0,
    ) -> None:
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self.model = model

    async def generate_json(
        self,
        prompt: str,
        *,
        system_prompt: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Generate a JSON object using OpenAI chat completions.

        Args:
            prompt: User prompt to send to the model.
            system_prompt: Optional system instructions, prepended to the JSON-only rule.
            **kwargs: Provider options (temperature, max_tokens, top_p, seed).

        Returns:
            dict[str, Any]: Parsed JSON object from the LLM response.

        Raises:
            UpstreamAppError: If the API call fails or the response is not a JSON object.
        """
        system_content = JSON_ONLY_INSTRUCTION
        if system_prompt:
            system_content = f"{system_prompt}\n\n{JSON_ONLY_INSTRUCTION}"

        request_params: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_content},
                {"role": "user", "content": prompt},
            ],
            "temperature": kwargs.pop("temperature", 0.7),
            "response_format": {"type": "json_object"},
        }
        for param in ("max_tokens", "top_p", "seed"):
            if param in kwargs:
                request_params[param] = kwargs[param]

        start = time.perf_counter()
        try:
            response = await self.client.chat.completions.create(**request_params)
        except OpenAIError as exc:
            logger.error(
                "llm.request_failed",
                extra={"model": self.model, "error_type": type(exc).__name__},
            )
            raise UpstreamAppError(
                code="llm_request_failed",
                message="Text generation service returned an error",
                details={"provider": self.provider},
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise UpstreamAppError(
                code="llm_empty_response",
                message="Text generation service returned an empty response",
                details={"provider": self.provider},
            )

        try:
            parsed = json.loads(content.strip())
        except json.JSONDecodeError as exc:
            raise UpstreamAppError(
                code="llm_invalid_json",
                message="Text generation service returned invalid JSON",
                details={"provider": self.provider},
            ) from exc

        if not isinstance(parsed, dict):
            raise UpstreamAppError(
                code="llm_invalid_json",
                message="Text generation service returned invalid JSON",
                details={"provider": self.provider},
            )

        logger.info(
            "llm.completed",
            extra={
                "model": self.model,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                "response_chars": len(content),
            },
        )
        return parsed
