from abc import ABC, abstractmethod
from typing import Any


class AbstractLLMClient(ABC):
	"""Text-generation provider returning one JSON object per call.

	Subclasses set ``provider`` so errors and logs name the failing service.
	"""

	provider: str = "unknown"

	@abstractmethod
	async def generate_json(
		self,
		prompt: str,
		*,
		system_prompt: str | None = None,
		**kwargs: Any,
	) -> dict[str, Any]:
		"""Ask the model for a JSON object.

		Args:
			prompt: Prompt assembled from sanitized request values only.
			system_prompt: Instructions framing user values as data.
			**kwargs: Sampling options (temperature, max_tokens, top_p, seed).

		Returns:
			dict[str, Any]: The decoded object.

		Raises:
			UpstreamAppError: On transport failure, an empty reply or a reply
				that is not a JSON object.
		"""
		...
