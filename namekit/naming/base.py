"""Base classes for naming providers."""

import base64
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from namekit.config.constants import GEMINI_ENDPOINT_TEMPLATE, OPENAI_CHAT_ENDPOINT
from namekit.exceptions import HttpStatusError, InvalidResponseError, NetworkError
from namekit.utils.logging import get_logger

log = get_logger(__name__)


class AIModel(str, Enum):
    """AI models that can suggest file names."""

    GEMINI_PRO = "Gemini Pro"
    GEMINI_PRO_VISION = "Gemini Pro Vision"
    GEMINI_ULTRA = "Gemini Ultra"
    GPT4 = "GPT-4"
    GPT4_TURBO = "GPT-4 Turbo"
    GPT35_TURBO = "GPT-3.5 Turbo"

    @property
    def provider(self) -> str:
        """Provider family ("gemini" or "openai")."""
        return "gemini" if self.name.startswith("GEMINI") else "openai"

    @property
    def full_name(self) -> str:
        """Model identifier sent to the API."""
        return _FULL_NAMES[self]

    @property
    def api_endpoint(self) -> str:
        """Default endpoint for the model."""
        if self.provider == "gemini":
            return GEMINI_ENDPOINT_TEMPLATE.format(model=self.full_name)
        return OPENAI_CHAT_ENDPOINT


_FULL_NAMES = {
    AIModel.GEMINI_PRO: "gemini-1.5-pro",
    AIModel.GEMINI_PRO_VISION: "gemini-1.5-pro-vision",
    AIModel.GEMINI_ULTRA: "gemini-1.5-ultra",
    AIModel.GPT4: "gpt-4",
    AIModel.GPT4_TURBO: "gpt-4-turbo-preview",
    AIModel.GPT35_TURBO: "gpt-3.5-turbo",
}


@dataclass
class ContentPart:
    """One ordered part of a naming request."""

    type: str  # "text" or "image"
    text: str | None = None
    data: bytes | None = None
    mime_type: str = "image/jpeg"

    @classmethod
    def from_text(cls, text: str) -> "ContentPart":
        """Create a text part."""
        return cls(type="text", text=text)

    @classmethod
    def from_image(cls, data: bytes, mime_type: str = "image/jpeg") -> "ContentPart":
        """Create an inline image part."""
        return cls(type="image", data=data, mime_type=mime_type)

    @property
    def base64_data(self) -> str:
        """Image bytes as base64 text."""
        return base64.b64encode(self.data or b"").decode("ascii")


@dataclass
class NamingRequest:
    """A fully resolved naming request, ready to be sent."""

    model: AIModel
    endpoint: str
    api_key: str
    parts: list[ContentPart]
    temperature: float = 0.7


class BaseNamingProvider(ABC):
    """Abstract base class for naming providers.

    A provider knows how to turn a ``NamingRequest`` into one HTTP POST and
    how to read the suggested text out of the response body.
    """

    name: str = "base"

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    @abstractmethod
    def build_body(self, request: NamingRequest) -> dict[str, Any]:
        """Build the JSON body for a request."""
        ...

    @abstractmethod
    def extract_text(self, payload: Any) -> str | None:
        """Extract the suggested text from a decoded response body."""
        ...

    def build_params(self, request: NamingRequest) -> dict[str, str]:  # noqa: ARG002
        """Query parameters for the request."""
        return {}

    def build_headers(self, request: NamingRequest) -> dict[str, str]:  # noqa: ARG002
        """HTTP headers for the request."""
        return {"Content-Type": "application/json"}

    async def request_suggestion(self, request: NamingRequest) -> str | None:
        """Send exactly one POST and return the raw suggested text.

        Raises:
            NetworkError: Transport failure
            HttpStatusError: Non-200 response
            InvalidResponseError: Body is not JSON
        """
        try:
            response = await self.client.post(
                request.endpoint,
                params=self.build_params(request),
                headers=self.build_headers(request),
                json=self.build_body(request),
            )
        except httpx.HTTPError as e:
            log.warning(
                "Naming request failed",
                provider=self.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise NetworkError(e) from e

        if response.status_code != 200:
            log.warning(
                "Naming request returned error status",
                provider=self.name,
                status_code=response.status_code,
            )
            raise HttpStatusError(response.status_code)

        try:
            payload = response.json()
        except ValueError as e:
            raise InvalidResponseError() from e

        return self.extract_text(payload)
