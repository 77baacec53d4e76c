"""Tests for the Gemini and OpenAI naming providers."""

import json

import httpx
import pytest

from namekit.exceptions import HttpStatusError, InvalidResponseError, NetworkError
from namekit.naming.base import AIModel, ContentPart, NamingRequest
from namekit.naming.gemini import GeminiNamingProvider
from namekit.naming.openai import OpenAINamingProvider


def _request(model: AIModel = AIModel.GEMINI_PRO) -> NamingRequest:
    return NamingRequest(
        model=model,
        endpoint=model.api_endpoint,
        api_key="secret-key",
        parts=[
            ContentPart.from_text("Name this image."),
            ContentPart.from_image(b"\xff\xd8jpegbytes"),
            ContentPart.from_text("Original file name: cat.jpg"),
        ],
        temperature=0.3,
    )


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestAIModel:
    """Tests for AIModel metadata."""

    def test_providers(self):
        """Test the provider family of each model."""
        assert AIModel.GEMINI_PRO.provider == "gemini"
        assert AIModel.GEMINI_ULTRA.provider == "gemini"
        assert AIModel.GPT4.provider == "openai"
        assert AIModel.GPT35_TURBO.provider == "openai"

    def test_endpoints(self):
        """Test default endpoints."""
        assert AIModel.GEMINI_PRO_VISION.api_endpoint == (
            "https://generativelanguage.googleapis.com/v1beta/models/"
            "gemini-1.5-pro-vision:generateContent"
        )
        assert AIModel.GPT4_TURBO.api_endpoint == "https://api.openai.com/v1/chat/completions"
        assert AIModel.GPT4_TURBO.full_name == "gpt-4-turbo-preview"


class TestGeminiProvider:
    """Tests for GeminiNamingProvider."""

    @pytest.mark.asyncio
    async def test_request_shape(self):
        """Test key query parameter and ordered content parts."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = request.url
            captured["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={"candidates": [{"content": {"parts": [{"text": "Sleepy Cat"}]}}]},
            )

        async with _client(handler) as client:
            text = await GeminiNamingProvider(client).request_suggestion(_request())

        assert text == "Sleepy Cat"
        assert captured["url"].params["key"] == "secret-key"
        assert captured["url"].path.endswith("gemini-1.5-pro:generateContent")

        parts = captured["body"]["contents"][0]["parts"]
        assert parts[0] == {"text": "Name this image."}
        assert parts[1]["inline_data"]["mime_type"] == "image/jpeg"
        assert parts[1]["inline_data"]["data"] == ContentPart.from_image(b"\xff\xd8jpegbytes").base64_data
        assert parts[2] == {"text": "Original file name: cat.jpg"}
        assert captured["body"]["generationConfig"] == {"temperature": 0.3}

    @pytest.mark.asyncio
    async def test_non_200(self):
        """Test non-success status raises HttpStatusError."""
        async with _client(lambda request: httpx.Response(403, json={})) as client:
            with pytest.raises(HttpStatusError) as exc_info:
                await GeminiNamingProvider(client).request_suggestion(_request())

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        """Test transport errors raise NetworkError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(NetworkError):
                await GeminiNamingProvider(client).request_suggestion(_request())

    @pytest.mark.asyncio
    async def test_non_json_body(self):
        """Test a non-JSON body raises InvalidResponseError."""
        async with _client(lambda request: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(InvalidResponseError):
                await GeminiNamingProvider(client).request_suggestion(_request())

    @pytest.mark.asyncio
    async def test_missing_candidates(self):
        """Test a body without candidates yields None."""
        async with _client(lambda request: httpx.Response(200, json={"candidates": []})) as client:
            assert await GeminiNamingProvider(client).request_suggestion(_request()) is None


class TestOpenAIProvider:
    """Tests for OpenAINamingProvider."""

    @pytest.mark.asyncio
    async def test_request_shape(self):
        """Test bearer auth and chat-completions body."""
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["headers"] = request.headers
            captured["url"] = request.url
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "tabby-nap"}}]})

        async with _client(handler) as client:
            text = await OpenAINamingProvider(client).request_suggestion(_request(AIModel.GPT4))

        assert text == "tabby-nap"
        assert captured["headers"]["authorization"] == "Bearer secret-key"
        assert "key" not in captured["url"].params

        body = captured["body"]
        assert body["model"] == "gpt-4"
        assert body["temperature"] == 0.3
        content = body["messages"][0]["content"]
        assert [part["type"] for part in content] == ["text", "image_url", "text"]
        assert content[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")

    @pytest.mark.asyncio
    async def test_unexpected_shape(self):
        """Test a body without choices yields None."""
        async with _client(lambda request: httpx.Response(200, json={"error": "x"})) as client:
            assert await OpenAINamingProvider(client).request_suggestion(_request(AIModel.GPT4)) is None
