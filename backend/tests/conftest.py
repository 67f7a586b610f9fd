"""Shared fixtures: template-backed app, in-memory store, controllable providers."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
import pytest

from zerotomarket.config import Settings
from zerotomarket.main import create_app
from zerotomarket.models.campaign import ProductInput
from zerotomarket.services.campaign_store import InMemoryCampaignStore
from zerotomarket.services.llm_provider import (
    CompletionMode,
    CompletionOptions,
    CompletionProvider,
    ProviderError,
)
from zerotomarket.services.template_service import TemplateProvider

ACME = {
    "name": "Acme Rocket",
    "description": "A faster onboarding tool",
    "target_audience": "startup founders",
    "industry": "saas",
}


class GatedProvider(CompletionProvider):
    """Holds every completion until ``gate`` is set; tracks concurrency."""

    name = "gated"
    model = "test"

    def __init__(self) -> None:
        self.gate = asyncio.Event()
        self.inner = TemplateProvider()
        self.in_flight = 0
        self.max_in_flight = 0
        self.modes: list[CompletionMode] = []

    async def complete(self, prompt: str, options: CompletionOptions) -> str:
        self.modes.append(options.mode)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await self.gate.wait()
            return await self.inner.complete(prompt, options)
        finally:
            self.in_flight -= 1


class FailingProvider(CompletionProvider):
    """Template responses, except the listed modes raise ProviderError."""

    name = "failing"
    model = "test"

    def __init__(self, *failing: CompletionMode) -> None:
        self.failing = set(failing)
        self.inner = TemplateProvider()

    async def complete(self, prompt: str, options: CompletionOptions) -> str:
        if options.mode in self.failing:
            raise ProviderError(self.name, f"{options.mode.value} unavailable")
        return await self.inner.complete(prompt, options)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        LLM_PROVIDER="template",
        OPENAI_API_KEY="",
        ANTHROPIC_API_KEY="",
        CREATOR_PACING_SECONDS=0,
        PROVIDER_TIMEOUT_SECONDS=5,
        PIPELINE_WORKERS=2,
        CAMPAIGN_TTL_MINUTES=0,
    )


@pytest.fixture
def store() -> InMemoryCampaignStore:
    return InMemoryCampaignStore()


@pytest.fixture
def product() -> ProductInput:
    return ProductInput(**ACME)


@pytest.fixture
def make_client(settings, store):
    """Factory for an HTTP client bound to a running app with a given provider."""

    @asynccontextmanager
    async def _make(provider: CompletionProvider | None = None) -> AsyncIterator[httpx.AsyncClient]:
        app = create_app(settings, store=store, provider=provider or TemplateProvider())
        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(
                transport=transport, base_url="http://testserver"
            ) as client:
                yield client

    return _make


@pytest.fixture
async def client(make_client):
    async with make_client() as c:
        yield c


async def wait_for_terminal(
    client: httpx.AsyncClient, campaign_id: str, timeout: float = 5.0
) -> dict:
    """Poll GET /campaign/{id} until completed or failed."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while True:
        resp = await client.get(f"/campaign/{campaign_id}")
        assert resp.status_code == 200
        data = resp.json()
        if data["status"] in ("completed", "failed"):
            return data
        if loop.time() > deadline:
            raise AssertionError(f"campaign still {data['status']} after {timeout}s")
        await asyncio.sleep(0.01)
