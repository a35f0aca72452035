from abc import ABC, abstractmethod
from typing import Any


class AbstractSpeechClient(ABC):
    """Interface for text-to-speech / speech-to-text providers."""

    @abstractmethod
    async def synthesize(self, text: str, voice_id: str) -> bytes:
        """Render ``text`` as MP3 audio with the given voice.

        Raises:
            UpstreamAppError: If the provider call fails.
        """
        ...

    @abstractmethod
    async def transcribe(
        self,
        audio: bytes,
        *,
        filename: str,
        content_type: str,
    ) -> dict[str, Any]:
        """Transcribe an audio recording.

        Returns:
            dict[str, Any]: Provider transcription payload (``text`` plus word timings).

        Raises:
            UpstreamAppError: If the provider call fails.
        """
        ...
