"""AI naming providers for namekit."""

from namekit.naming.base import AIModel, BaseNamingProvider, ContentPart, NamingRequest
from namekit.naming.gemini import GeminiNamingProvider
from namekit.naming.openai import OpenAINamingProvider

__all__ = [
    "AIModel",
    "BaseNamingProvider",
    "ContentPart",
    "NamingRequest",
    "GeminiNamingProvider",
    "OpenAINamingProvider",
]
