"""Tests for HTTP-based provider clients (Groq chat, Whisper transcription).

Requests are served by httpx.MockTransport; nothing leaves the process.
"""

import json

import httpx
import pytest

from vidscribe.services.ai_clients import (
    AIClientConfig,
    AIClientResponseError,
    GroqClient,
    WhisperClient,
)

BASE_URL = "https://api.groq.test/openai/v1"


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


# =============================================================================
# GroqClient
# =============================================================================


class TestGroqClient:
    """Tests for GroqClient.generate."""

    @pytest.mark.asyncio
    async def test_generate_requests_json_object(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "choices": [{"message": {"content": '{"summary": "S"}'}}],
                    "usage": {"prompt_tokens": 10, "completion_tokens": 5},
                },
            )

        config = AIClientConfig(base_url=BASE_URL, api_key="key")
        client = GroqClient(config, default_model="llama-test", http_client=mock_client(handler))

        text = await client.generate("Summarize", json_output=True)
        await client.close()

        assert text == '{"summary": "S"}'
        assert captured["path"].endswith("/chat/completions")
        assert captured["body"]["model"] == "llama-test"
        assert captured["body"]["response_format"] == {"type": "json_object"}
        assert captured["body"]["messages"] == [{"role": "user", "content": "Summarize"}]

    @pytest.mark.asyncio
    async def test_http_error_is_translated(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="over capacity")

        config = AIClientConfig(base_url=BASE_URL, api_key="key")
        client = GroqClient(config, http_client=mock_client(handler))

        with pytest.raises(AIClientResponseError) as exc_info:
            await client.generate("Summarize")
        await client.close()

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_empty_choices_return_empty_text(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"choices": []})

        config = AIClientConfig(base_url=BASE_URL, api_key="key")
        client = GroqClient(config, http_client=mock_client(handler))

        assert await client.generate("Summarize") == ""
        await client.close()

    def test_requires_api_key(self):
        with pytest.raises(ValueError):
            GroqClient(AIClientConfig(base_url=BASE_URL, api_key=None))

    def test_display_name(self):
        config = AIClientConfig(base_url=BASE_URL, api_key="key")
        client = GroqClient(config, default_model="llama-test", http_client=mock_client(None))
        assert client.display_name == "Groq llama-test"


# =============================================================================
# WhisperClient
# =============================================================================


class TestWhisperClient:
    """Tests for WhisperClient.transcribe."""

    @pytest.mark.asyncio
    async def test_transcribe_uploads_audio(self):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["body"] = request.read()
            return httpx.Response(200, json={"text": "  hello world  "})

        client = WhisperClient(
            BASE_URL,
            api_key="key",
            model="whisper-test",
            http_client=mock_client(handler),
        )

        text = await client.transcribe(b"ID3audio", "audio_1.mp3", "audio/mpeg")
        await client.close()

        assert text == "hello world"
        assert captured["path"].endswith("/audio/transcriptions")
        assert b"whisper-test" in captured["body"]
        assert b"ID3audio" in captured["body"]

    @pytest.mark.asyncio
    async def test_health_check(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200 if request.url.path.endswith("/models") else 404)

        client = WhisperClient(BASE_URL, api_key="key", http_client=mock_client(handler))
        assert await client.check_health() is True
        await client.close()
