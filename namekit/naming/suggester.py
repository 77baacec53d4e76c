"""Naming suggester: one model request per file, cleaned into a file name."""

from pathlib import Path
from typing import TYPE_CHECKING

import anyio
import httpx

from namekit.config.preferences import AppSettings
from namekit.config.settings import NamingConfig
from namekit.core.formats import FileCategory
from namekit.exceptions import (
    EmptySuggestionError,
    InvalidEndpointError,
    MissingCredentialError,
    MissingTemplateError,
    UnreadableInputError,
)
from namekit.image.compressor import CompressionConfig, ImageCompressor
from namekit.naming.base import AIModel, BaseNamingProvider, ContentPart, NamingRequest
from namekit.naming.gemini import GeminiNamingProvider
from namekit.naming.openai import OpenAINamingProvider
from namekit.utils.fs import clean_filename
from namekit.utils.logging import get_logger, request_context

if TYPE_CHECKING:
    from namekit.core.models import FileEntry

log = get_logger(__name__)

_PROVIDERS: dict[str, type[BaseNamingProvider]] = {
    "gemini": GeminiNamingProvider,
    "openai": OpenAINamingProvider,
}


def validate_endpoint(endpoint: str) -> str:
    """Check that an endpoint is an absolute http(s) URL.

    Raises:
        InvalidEndpointError: If the URL cannot be used
    """
    try:
        url = httpx.URL(endpoint.strip())
    except (httpx.InvalidURL, TypeError) as e:
        raise InvalidEndpointError(endpoint) from e

    if url.scheme not in ("http", "https") or not url.host:
        raise InvalidEndpointError(endpoint)
    return str(url)


class NamingSuggester:
    """Suggest a descriptive file name for an entry using an AI model.

    Each call resolves model, credential, template and endpoint from the
    given ``AppSettings``, builds the ordered content parts and issues
    exactly one HTTP request. Nothing is written to disk.

    The HTTP client is created lazily unless one is passed in; a passed-in
    client is not closed by ``aclose``.
    """

    def __init__(
        self,
        config: NamingConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or NamingConfig()
        self._client = client
        self._owns_client = client is None
        self.compressor = ImageCompressor(
            CompressionConfig(
                max_bytes=self.config.max_image_bytes,
                initial_quality=self.config.initial_jpeg_quality,
                min_quality=self.config.min_jpeg_quality,
                quality_step=self.config.jpeg_quality_step,
            )
        )

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this suggester created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "NamingSuggester":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def suggest_name(self, entry: "FileEntry", settings: AppSettings) -> str:
        """Suggest a cleaned file name (without extension) for an entry.

        Args:
            entry: File entry to name
            settings: Settings snapshot to resolve model, key and prompt from

        Returns:
            Cleaned, non-empty base name

        Raises:
            MissingCredentialError: No API key for the resolved model
            MissingTemplateError: No prompt template for the entry's category
            InvalidEndpointError: Endpoint is not an absolute http(s) URL
            UnreadableInputError: File content cannot be read or prepared
            NetworkError: Transport failure
            HttpStatusError: Non-200 response
            InvalidResponseError: Response body is not JSON
            EmptySuggestionError: No usable name in the response
        """
        category = entry.category
        model = settings.model_for(category)

        with request_context(file_path=entry.original_name, model=model.value):
            request = await self.build_request(entry, settings, model)
            provider = self._provider_for(model)

            log.info(
                "Requesting name suggestion",
                provider=provider.name,
                category=category.value,
                parts=len(request.parts),
            )

            raw = await provider.request_suggestion(request)
            if raw is None or not raw.strip():
                raise EmptySuggestionError()

            name = clean_filename(raw)
            if not name:
                raise EmptySuggestionError(f"Suggestion has no usable characters: {raw!r}")

            log.info("Name suggested", suggestion=name)
            return name

    async def build_request(
        self, entry: "FileEntry", settings: AppSettings, model: AIModel
    ) -> NamingRequest:
        """Resolve credential, template and endpoint and build the content parts.

        The credential is checked first so that a missing key never touches
        the file or the network.
        """
        api_key = settings.api_key_for(model)
        if api_key is None:
            raise MissingCredentialError(model.value)

        category = entry.category
        template = settings.prompt_templates.get(category, "").strip()
        if not template:
            raise MissingTemplateError(category.value)

        endpoint = validate_endpoint(settings.endpoint_for(model))

        parts = [ContentPart.from_text(template)]
        parts.extend(await self._content_parts(entry.source, category))
        parts.append(ContentPart.from_text(f"Original file name: {entry.original_name}"))

        return NamingRequest(
            model=model,
            endpoint=endpoint,
            api_key=api_key,
            parts=parts,
            temperature=settings.temperature,
        )

    async def _content_parts(self, path: Path, category: FileCategory) -> list[ContentPart]:
        if category == FileCategory.IMAGE:
            compressed = await anyio.to_thread.run_sync(self.compressor.compress_file, path)
            return [ContentPart.from_image(compressed.data)]

        if category == FileCategory.TEXT and self.config.text_excerpt_chars > 0:
            excerpt = await anyio.to_thread.run_sync(self._read_excerpt, path)
            if excerpt.strip():
                return [ContentPart.from_text(excerpt)]

        return []

    def _read_excerpt(self, path: Path) -> str:
        try:
            with open(path, encoding="utf-8", errors="replace") as f:
                return f.read(self.config.text_excerpt_chars)
        except OSError as e:
            raise UnreadableInputError(path, str(e)) from e

    def _provider_for(self, model: AIModel) -> BaseNamingProvider:
        return _PROVIDERS[model.provider](self.client)
