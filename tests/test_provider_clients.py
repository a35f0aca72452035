"""Tests for the ElevenLabs and OpenAI adapters and their factories."""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock, patch

import httpx
import pytest
from elevenlabs.core.api_error import ApiError

from app.adapters.llm.factory import create_llm_client
from app.adapters.llm.openai_client import OpenAIClient
from app.adapters.speech.elevenlabs_client import ElevenLabsClient
from app.adapters.speech.factory import create_speech_client
from app.core.errors import ConfigurationAppError, UpstreamAppError


def _elevenlabs() -> ElevenLabsClient:
    return ElevenLabsClient("xi-test-key")


def _audio_stream(*chunks: bytes, error: Exception | None = None):
    async def stream():
        for chunk in chunks:
            yield chunk
        if error is not None:
            raise error

    return stream()


class TestElevenLabsClient:
    def test_synthesize(self) -> None:
        client = _elevenlabs()
        client.client.text_to_speech.convert = Mock(return_value=_audio_stream(b"mp3-", b"bytes"))

        audio = asyncio.run(client.synthesize("Hello", "21m00Tcm4TlvDq8ikWAM"))

        assert audio == b"mp3-bytes"
        call = client.client.text_to_speech.convert.call_args
        assert call.args == ("21m00Tcm4TlvDq8ikWAM",)
        assert call.kwargs["text"] == "Hello"
        assert call.kwargs["model_id"] == "eleven_multilingual_v2"
        assert call.kwargs["output_format"] == "mp3_44100_128"
        assert call.kwargs["voice_settings"].stability == 0.5

    def test_transcribe(self) -> None:
        client = _elevenlabs()
        transcription = Mock()
        transcription.model_dump.return_value = {"text": "Hello judges", "words": []}
        client.client.speech_to_text.convert = AsyncMock(return_value=transcription)

        result = asyncio.run(client.transcribe(b"audio", filename="pitch.webm", content_type="audio/webm"))

        assert result == {"text": "Hello judges", "words": []}
        kwargs = client.client.speech_to_text.convert.await_args.kwargs
        assert kwargs["file"] == ("pitch.webm", b"audio", "audio/webm")
        assert kwargs["model_id"] == "scribe_v1"
        assert kwargs["timestamps_granularity"] == "word"
        assert kwargs["language_code"] == "eng"

    def test_provider_error(self) -> None:
        client = _elevenlabs()
        client.client.text_to_speech.convert = Mock(
            return_value=_audio_stream(error=ApiError(status_code=401, body={"detail": "bad key"}))
        )

        with pytest.raises(UpstreamAppError) as exc_info:
            asyncio.run(client.synthesize("Hello", "21m00Tcm4TlvDq8ikWAM"))

        assert exc_info.value.code == "speech_provider_error"
        assert exc_info.value.details == {"provider": "elevenlabs", "http_status": 401}

    def test_transport_error(self) -> None:
        client = _elevenlabs()
        client.client.speech_to_text.convert = AsyncMock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(UpstreamAppError) as exc_info:
            asyncio.run(client.transcribe(b"a", filename="a.wav", content_type="audio/wav"))

        assert exc_info.value.code == "speech_request_failed"

    def test_invalid_transcription_payload(self) -> None:
        client = _elevenlabs()
        client.client.speech_to_text.convert = AsyncMock(return_value="not a transcription")

        with pytest.raises(UpstreamAppError) as exc_info:
            asyncio.run(client.transcribe(b"a", filename="a.wav", content_type="audio/wav"))

        assert exc_info.value.code == "speech_invalid_response"


def _completion(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestOpenAIClient:
    def _client(self, content: str | None) -> OpenAIClient:
        client = OpenAIClient(api_key="sk-test", model="gpt-4o-mini")
        client.client.chat.completions.create = AsyncMock(return_value=_completion(content))
        return client

    def test_generate_json(self) -> None:
        client = self._client('{"problems": ["a"]}')

        result = asyncio.run(client.generate_json("Idea: x", system_prompt="Coach", temperature=0.2))

        assert result == {"problems": ["a"]}
        params = client.client.chat.completions.create.await_args.kwargs
        assert params["model"] == "gpt-4o-mini"
        assert params["temperature"] == 0.2
        assert params["response_format"] == {"type": "json_object"}
        assert params["messages"][0]["content"].startswith("Coach")
        assert params["messages"][1] == {"role": "user", "content": "Idea: x"}

    @pytest.mark.parametrize(
        ("content", "code"),
        [(None, "llm_empty_response"), ("not json", "llm_invalid_json"), ("[1, 2]", "llm_invalid_json")],
    )
    def test_bad_responses(self, content, code: str) -> None:
        with pytest.raises(UpstreamAppError) as exc_info:
            asyncio.run(self._client(content).generate_json("x"))

        assert exc_info.value.code == code


class TestFactories:
    @patch("app.adapters.llm.factory.settings")
    def test_llm_requires_key(self, mock_settings) -> None:
        mock_settings.llm.provider = "openai"
        mock_settings.llm.api_key = None

        with pytest.raises(ConfigurationAppError) as exc_info:
            create_llm_client()

        assert exc_info.value.code == "llm_missing_api_key"

    @patch("app.adapters.llm.factory.settings")
    def test_llm_unknown_provider(self, mock_settings) -> None:
        mock_settings.llm.provider = "gemini"

        with pytest.raises(ConfigurationAppError) as exc_info:
            create_llm_client()

        assert exc_info.value.code == "llm_unknown_provider"

    @patch("app.adapters.llm.factory.settings")
    def test_llm_builds_openai_client(self, mock_settings) -> None:
        mock_settings.llm.provider = "OpenAI"
        mock_settings.llm.api_key = "sk-test"
        mock_settings.llm.model = "gpt-4o-mini"
        mock_settings.llm.base_url = None
        mock_settings.llm.timeout_seconds = 10.0

        assert isinstance(create_llm_client(), OpenAIClient)

    @patch("app.adapters.speech.factory.settings")
    def test_speech_requires_key(self, mock_settings) -> None:
        mock_settings.speech.api_key = None

        with pytest.raises(ConfigurationAppError) as exc_info:
            create_speech_client()

        assert exc_info.value.code == "speech_missing_api_key"

    @patch("app.adapters.speech.factory.settings")
    def test_speech_builds_client(self, mock_settings) -> None:
        mock_settings.speech.api_key = "xi-key"
        mock_settings.speech.base_url = "https://api.elevenlabs.io/"
        mock_settings.speech.tts_model = "eleven_multilingual_v2"
        mock_settings.speech.stt_model = "scribe_v1"
        mock_settings.speech.timeout_seconds = 30.0

        client = create_speech_client()

        assert isinstance(client, ElevenLabsClient)
        assert client.base_url == "https://api.elevenlabs.io"
