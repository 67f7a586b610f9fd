"""Campaign creation and status endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from zerotomarket.api.dependencies import get_provider, get_runner, get_store
from zerotomarket.models.campaign import (
    CampaignOut,
    ProductInput,
    StartCampaignResponse,
)
from zerotomarket.orchestrator.runner import CampaignRunner
from zerotomarket.services.campaign_store import CampaignStore
from zerotomarket.services.llm_provider import CompletionProvider

logger = logging.getLogger(__name__)

router = APIRouter(tags=["campaigns"])


@router.post("/start-campaign", response_model=StartCampaignResponse)
async def start_campaign(
    data: ProductInput,
    store: CampaignStore = Depends(get_store),
    runner: CampaignRunner = Depends(get_runner),
    provider: CompletionProvider = Depends(get_provider),
):
    """Register a campaign and queue its agent pipeline.

    Returns immediately; the client polls GET /campaign/{campaign_id}
    for stage progress and results.
    """
    campaign_id = await store.create(data)
    await runner.submit(campaign_id, data)

    return StartCampaignResponse(
        campaign_id=campaign_id,
        status="started",
        message=f"AI multi-agent workflow initiated with {provider.label}",
    )


@router.get("/campaign/{campaign_id}", response_model=CampaignOut)
async def get_campaign(
    campaign_id: str,
    store: CampaignStore = Depends(get_store),
    provider: CompletionProvider = Depends(get_provider),
):
    """Current status, per-agent progress and results of a campaign."""
    record = await store.get(campaign_id)
    return CampaignOut.from_record(record, ai_model=provider.label)


@router.get("/campaigns")
async def list_campaigns(store: CampaignStore = Depends(get_store)):
    """List all campaigns, newest first."""
    summaries = await store.list_summaries()
    return {"campaigns": [s.model_dump(mode="json") for s in summaries]}
