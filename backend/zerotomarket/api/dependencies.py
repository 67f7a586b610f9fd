"""FastAPI dependencies resolving the components built in the app lifespan."""

from __future__ import annotations

from fastapi import Request

from zerotomarket.orchestrator.runner import CampaignRunner
from zerotomarket.services.campaign_store import CampaignStore
from zerotomarket.services.llm_provider import CompletionProvider


def get_store(request: Request) -> CampaignStore:
    return request.app.state.store


def get_runner(request: Request) -> CampaignRunner:
    return request.app.state.runner


def get_provider(request: Request) -> CompletionProvider:
    return request.app.state.provider
