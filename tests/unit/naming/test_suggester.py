"""Tests for NamingSuggester."""

import json
from pathlib import Path

import httpx
import pytest

from namekit.config.preferences import AppSettings
from namekit.config.settings import NamingConfig
from namekit.core.formats import FileCategory
from namekit.core.models import FileEntry
from namekit.exceptions import (
    EmptySuggestionError,
    HttpStatusError,
    InvalidEndpointError,
    MissingCredentialError,
    MissingTemplateError,
    UnreadableInputError,
)
from namekit.naming.base import AIModel
from namekit.naming.suggester import NamingSuggester, validate_endpoint


def gemini_reply(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


class RecordingHandler:
    """MockTransport handler that records requests and replies with a fixed body."""

    def __init__(self, status_code: int = 200, body: dict | None = None):
        self.status_code = status_code
        self.body = body if body is not None else gemini_reply("suggested")
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.body)

    @property
    def last_body(self) -> dict:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def suggester(handler):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NamingSuggester(NamingConfig(), client=client)


class TestValidateEndpoint:
    """Tests for endpoint validation."""

    def test_valid(self):
        """Test absolute http(s) URLs are accepted."""
        assert validate_endpoint("https://api.example.com/v1").startswith("https://")
        assert validate_endpoint("http://localhost:8080/gen")

    @pytest.mark.parametrize("url", ["", "not a url", "ftp://example.com/x", "/relative/path"])
    def test_invalid(self, url):
        """Test unusable URLs raise InvalidEndpointError."""
        with pytest.raises(InvalidEndpointError):
            validate_endpoint(url)


class TestSuggestName:
    """Tests for NamingSuggester.suggest_name."""

    @pytest.mark.asyncio
    async def test_image_request(self, suggester, handler, sample_jpg, app_settings):
        """Test an image entry sends prompt, inline JPEG and file name."""
        handler.body = gemini_reply("  Sleepy Cat  ")

        name = await suggester.suggest_name(FileEntry.from_path(sample_jpg), app_settings)

        assert name == "Sleepy Cat"
        assert len(handler.requests) == 1
        request = handler.requests[0]
        assert request.url.params["key"] == "test-gemini-key"

        parts = handler.last_body["contents"][0]["parts"]
        assert parts[0]["text"] == app_settings.prompt_templates[FileCategory.IMAGE]
        assert parts[1]["inline_data"]["mime_type"] == "image/jpeg"
        assert parts[2]["text"] == "Original file name: cat.jpg"
        assert handler.last_body["generationConfig"]["temperature"] == app_settings.temperature

    @pytest.mark.asyncio
    async def test_heic_image_request(self, suggester, handler, sample_heic, app_settings):
        """Test a HEIC photo is sent as an inline JPEG."""
        handler.body = gemini_reply("Beach Day")

        name = await suggester.suggest_name(FileEntry.from_path(sample_heic), app_settings)

        assert name == "Beach Day"
        parts = handler.last_body["contents"][0]["parts"]
        assert parts[1]["inline_data"]["mime_type"] == "image/jpeg"
        assert parts[2]["text"] == "Original file name: beach.heic"

    @pytest.mark.asyncio
    async def test_text_request_includes_excerpt(
        self, suggester, handler, sample_text_file, app_settings
    ):
        """Test a text entry sends an excerpt of the file."""
        await suggester.suggest_name(FileEntry.from_path(sample_text_file), app_settings)

        parts = handler.last_body["contents"][0]["parts"]
        assert len(parts) == 3
        assert "budget review" in parts[1]["text"]
        assert parts[2]["text"] == "Original file name: note.txt"

    @pytest.mark.asyncio
    async def test_text_excerpt_is_truncated(self, handler, temp_dir, app_settings):
        """Test the excerpt respects text_excerpt_chars."""
        long_file = temp_dir / "long.txt"
        long_file.write_text("a" * 5000, encoding="utf-8")
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        suggester = NamingSuggester(NamingConfig(text_excerpt_chars=100), client=client)

        await suggester.suggest_name(FileEntry.from_path(long_file), app_settings)

        assert handler.last_body["contents"][0]["parts"][1]["text"] == "a" * 100

    @pytest.mark.asyncio
    async def test_cleans_illegal_characters(self, suggester, handler, sample_jpg, app_settings):
        """Test characters illegal in file names are stripped."""
        handler.body = gemini_reply(' "cat: on/a\\mat?" \n')

        name = await suggester.suggest_name(FileEntry.from_path(sample_jpg), app_settings)

        assert name == "cat onamat"

    @pytest.mark.asyncio
    async def test_missing_credential_makes_no_request(self, suggester, handler, sample_jpg):
        """Test no API key fails before any network call."""
        with pytest.raises(MissingCredentialError):
            await suggester.suggest_name(FileEntry.from_path(sample_jpg), AppSettings())

        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_category_model_override(self, suggester, handler, sample_jpg):
        """Test the per-category model decides which key is needed."""
        settings = AppSettings(
            api_keys={AIModel.GEMINI_PRO: "gemini-key"},
            conversion_models={FileCategory.IMAGE: AIModel.GPT4},
        )

        with pytest.raises(MissingCredentialError) as exc_info:
            await suggester.suggest_name(FileEntry.from_path(sample_jpg), settings)

        assert exc_info.value.model == "GPT-4"
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_openai_model(self, handler, sample_text_file):
        """Test GPT models use the chat-completions shape."""
        handler.body = {"choices": [{"message": {"content": "meeting-summary"}}]}
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        suggester = NamingSuggester(client=client)
        settings = AppSettings(ai_model=AIModel.GPT35_TURBO, api_keys={AIModel.GPT35_TURBO: "sk"})

        name = await suggester.suggest_name(FileEntry.from_path(sample_text_file), settings)

        assert name == "meeting-summary"
        assert handler.requests[0].headers["authorization"] == "Bearer sk"
        assert handler.last_body["model"] == "gpt-3.5-turbo"

    @pytest.mark.asyncio
    async def test_missing_template(self, suggester, handler, temp_dir, app_settings):
        """Test categories without a prompt template fail."""
        audio = temp_dir / "memo.mp3"
        audio.write_bytes(b"ID3")

        with pytest.raises(MissingTemplateError):
            await suggester.suggest_name(FileEntry.from_path(audio), app_settings)

        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_invalid_custom_endpoint(self, suggester, handler, sample_jpg):
        """Test a broken custom endpoint fails before sending."""
        settings = AppSettings(
            api_keys={AIModel.GEMINI_PRO: "k"},
            custom_endpoints={AIModel.GEMINI_PRO: "not-a-url"},
        )

        with pytest.raises(InvalidEndpointError):
            await suggester.suggest_name(FileEntry.from_path(sample_jpg), settings)

        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_custom_endpoint_used(self, suggester, handler, sample_jpg):
        """Test requests go to the configured endpoint."""
        settings = AppSettings(
            api_keys={AIModel.GEMINI_PRO: "k"},
            custom_endpoints={AIModel.GEMINI_PRO: "https://proxy.example.com/gen"},
        )

        await suggester.suggest_name(FileEntry.from_path(sample_jpg), settings)

        assert handler.requests[0].url.host == "proxy.example.com"

    @pytest.mark.asyncio
    async def test_http_error(self, handler, sample_jpg, app_settings):
        """Test non-200 responses surface the status code."""
        handler.status_code = 500
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

        with pytest.raises(HttpStatusError) as exc_info:
            await NamingSuggester(client=client).suggest_name(
                FileEntry.from_path(sample_jpg), app_settings
            )

        assert exc_info.value.status_code == 500
        assert len(handler.requests) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"candidates": []},
            gemini_reply(""),
            gemini_reply("   "),
            gemini_reply('???***"'),
        ],
    )
    async def test_empty_suggestion(self, handler, sample_jpg, app_settings, body):
        """Test empty or unusable suggestions raise EmptySuggestionError."""
        handler.body = body
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

        with pytest.raises(EmptySuggestionError):
            await NamingSuggester(client=client).suggest_name(
                FileEntry.from_path(sample_jpg), app_settings
            )

    @pytest.mark.asyncio
    async def test_unreadable_image(self, suggester, handler, temp_dir, app_settings):
        """Test an undecodable image fails without a request."""
        broken = temp_dir / "broken.jpg"
        broken.write_bytes(b"not an image")

        with pytest.raises(UnreadableInputError):
            await suggester.suggest_name(FileEntry.from_path(broken), app_settings)

        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_missing_text_file(self, suggester, handler, app_settings, tmp_path):
        """Test a vanished text file raises UnreadableInputError."""
        entry = FileEntry(source=Path(tmp_path / "gone.txt"))

        with pytest.raises(UnreadableInputError):
            await suggester.suggest_name(entry, app_settings)

        assert handler.requests == []


class TestClientLifecycle:
    """Tests for HTTP client ownership."""

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        """Test a lazily created client is closed by aclose."""
        suggester = NamingSuggester()
        client = suggester.client

        await suggester.aclose()

        assert client.is_closed

    @pytest.mark.asyncio
    async def test_injected_client_left_open(self, handler):
        """Test a passed-in client is not closed."""
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))

        async with NamingSuggester(client=client):
            pass

        assert not client.is_closed
        await client.aclose()
