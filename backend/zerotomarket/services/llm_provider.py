"""Completion provider interface shared by every stage agent.

Stage agents only see ``CompletionProvider.complete(prompt, options)``;
the concrete SDK or REST payloads live in the provider implementations.
"""

from __future__ import annotations

import abc
from enum import Enum

from pydantic import BaseModel

from zerotomarket.config import Settings


class CompletionMode(str, Enum):
    STRATEGY = "strategy"
    RESEARCH = "research"
    CONTENT = "content"
    OPTIMIZATION = "optimization"


class CompletionOptions(BaseModel):
    mode: CompletionMode = CompletionMode.STRATEGY
    max_tokens: int = 1000
    temperature: float = 0.7


class ProviderError(RuntimeError):
    """A completion call failed or returned something unusable."""

    def __init__(self, provider: str, message: str):
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class CompletionProvider(abc.ABC):
    """Turns a prompt into generated text."""

    name: str = "provider"
    model: str = ""

    @abc.abstractmethod
    async def complete(self, prompt: str, options: CompletionOptions) -> str:
        ...

    @property
    def label(self) -> str:
        return f"{self.name} {self.model}".strip()


def build_provider(settings: Settings) -> CompletionProvider:
    """Instantiate the provider selected by ``LLM_PROVIDER``."""
    # Imported here so a missing optional SDK only matters when selected
    if settings.llm_provider == "openai":
        from zerotomarket.services.openai_service import OpenAIProvider

        return OpenAIProvider(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            timeout=settings.provider_timeout_seconds,
        )
    if settings.llm_provider == "anthropic":
        from zerotomarket.services.claude_service import AnthropicProvider

        return AnthropicProvider(
            api_key=settings.anthropic_api_key,
            model=settings.anthropic_model,
        )
    if settings.llm_provider == "template":
        from zerotomarket.services.template_service import TemplateProvider

        return TemplateProvider()
    raise ValueError(f"Unknown LLM_PROVIDER: {settings.llm_provider!r}")
