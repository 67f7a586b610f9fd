"""Anthropic Claude client for stage prompts."""

from __future__ import annotations

import anthropic

from zerotomarket.services.llm_provider import (
    CompletionOptions,
    CompletionProvider,
    ProviderError,
)


class AnthropicProvider(CompletionProvider):
    """Wraps the Anthropic Python SDK behind the completion interface."""

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-20250514",
        client: anthropic.AsyncAnthropic | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self._client = client

    def _get_client(self) -> anthropic.AsyncAnthropic:
        if self._client is None:
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
        return self._client

    async def complete(self, prompt: str, options: CompletionOptions) -> str:
        if not self.api_key and self._client is None:
            raise ProviderError(self.name, "ANTHROPIC_API_KEY is not configured")

        client = self._get_client()
        try:
            message = await client.messages.create(
                model=self.model,
                max_tokens=options.max_tokens,
                temperature=options.temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise ProviderError(self.name, str(e)) from e

        text = "".join(
            block.text
            for block in message.content
            if getattr(block, "type", "") == "text"
        ).strip()
        if not text:
            raise ProviderError(self.name, "response had no text content")
        return text
