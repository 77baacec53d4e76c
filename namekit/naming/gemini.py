"""Google Gemini naming provider."""

from typing import Any

from namekit.naming.base import BaseNamingProvider, NamingRequest


class GeminiNamingProvider(BaseNamingProvider):
    """Gemini ``generateContent`` REST API, API key passed as query parameter."""

    name = "gemini"

    def build_params(self, request: NamingRequest) -> dict[str, str]:
        return {"key": request.api_key}

    def build_body(self, request: NamingRequest) -> dict[str, Any]:
        parts: list[dict[str, Any]] = []
        for part in request.parts:
            if part.type == "text":
                parts.append({"text": part.text})
            elif part.type == "image":
                parts.append(
                    {
                        "inline_data": {
                            "mime_type": part.mime_type,
                            "data": part.base64_data,
                        }
                    }
                )

        return {
            "contents": [{"parts": parts}],
            "generationConfig": {"temperature": request.temperature},
        }

    def extract_text(self, payload: Any) -> str | None:
        # candidates[0].content.parts[0].text
        try:
            return payload["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return None
