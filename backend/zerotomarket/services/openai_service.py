"""OpenAI chat completions client.

Auth: Bearer token.
Base URL: https://api.openai.com/v1
Endpoint: POST /chat/completions
Response: data["choices"][0]["message"]["content"]
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from zerotomarket.services.llm_provider import (
    CompletionOptions,
    CompletionProvider,
    ProviderError,
)

logger = logging.getLogger(__name__)


class OpenAIProvider(CompletionProvider):
    """Sends stage prompts to the OpenAI chat completions endpoint."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def complete(self, prompt: str, options: CompletionOptions) -> str:
        if not self.api_key:
            raise ProviderError(self.name, "OPENAI_API_KEY is not configured")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=payload,
                    headers=self._headers(),
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                self.name, f"HTTP {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(self.name, f"request failed: {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, "response was not JSON") from e

        content = _message_content(data)
        if not isinstance(content, str) or not content.strip():
            logger.warning(
                "Unexpected OpenAI response format: %s",
                list(data.keys()) if isinstance(data, dict) else type(data).__name__,
            )
            raise ProviderError(self.name, "response had no message content")
        return content.strip()


def _message_content(data: Any) -> Any:
    """``data["choices"][0]["message"]["content"]``, or None if any layer is off."""
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        return None
    return message.get("content")
