"""OpenAI chat-completions naming provider."""

from typing import Any

from namekit.naming.base import BaseNamingProvider, NamingRequest


class OpenAINamingProvider(BaseNamingProvider):
    """OpenAI chat completions REST API with bearer authentication."""

    name = "openai"

    def build_headers(self, request: NamingRequest) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {request.api_key}",
        }

    def build_body(self, request: NamingRequest) -> dict[str, Any]:
        content: list[dict[str, Any]] = []
        for part in request.parts:
            if part.type == "text":
                content.append({"type": "text", "text": part.text})
            elif part.type == "image":
                content.append(
                    {
                        "type": "image_url",
                        "image_url": {"url": f"data:{part.mime_type};base64,{part.base64_data}"},
                    }
                )

        return {
            "model": request.model.full_name,
            "messages": [{"role": "user", "content": content}],
            "temperature": request.temperature,
        }

    def extract_text(self, payload: Any) -> str | None:
        try:
            return payload["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return None
