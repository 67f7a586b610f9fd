"""Pipeline driver and runner: ordering, concurrency and failure policy."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

import pytest

from conftest import FailingProvider, GatedProvider
from zerotomarket.models.campaign import CampaignStatus, StageName, StageState
from zerotomarket.orchestrator.pipeline import CampaignPipeline
from zerotomarket.orchestrator.runner import CampaignRunner
from zerotomarket.orchestrator.scheduler import evict_expired
from zerotomarket.services.llm_provider import CompletionMode
from zerotomarket.services.template_service import TemplateProvider


@pytest.mark.asyncio
async def test_full_run_completes(store, product, settings):
    campaign_id = await store.create(product)
    pipeline = CampaignPipeline.build(store, TemplateProvider(), settings)

    outputs = await pipeline.run(campaign_id, product)

    assert set(outputs) == {"strategist", "researcher", "creator", "coordinator"}
    record = await store.get(campaign_id)
    assert record.status == CampaignStatus.COMPLETED
    assert set(record.results) == set(StageName)
    assert record.results[StageName.COORDINATOR]["readiness_score"] == 8.0


@pytest.mark.asyncio
async def test_strategist_and_researcher_run_concurrently(store, product, settings):
    campaign_id = await store.create(product)
    provider = GatedProvider()
    pipeline = CampaignPipeline.build(store, provider, settings)

    task = asyncio.create_task(pipeline.run(campaign_id, product))
    while provider.in_flight < 2:
        await asyncio.sleep(0)

    record = await store.get(campaign_id)
    assert record.status == CampaignStatus.RUNNING
    assert record.stage_statuses[StageName.STRATEGIST].status == StageState.RUNNING
    assert record.stage_statuses[StageName.RESEARCHER].status == StageState.RUNNING
    assert record.stage_statuses[StageName.CREATOR].status == StageState.PENDING
    assert set(provider.modes) == {CompletionMode.STRATEGY, CompletionMode.RESEARCH}

    provider.gate.set()
    await task
    # Nothing after phase one overlaps
    assert provider.max_in_flight == 2
    assert (await store.get(campaign_id)).status == CampaignStatus.COMPLETED


@pytest.mark.asyncio
async def test_stage_failure_continues_then_fails_campaign(store, product, settings):
    campaign_id = await store.create(product)
    pipeline = CampaignPipeline.build(
        store, FailingProvider(CompletionMode.RESEARCH), settings
    )

    outputs = await pipeline.run(campaign_id, product)

    assert "error" in outputs["researcher"]
    assert "error" not in outputs["creator"]
    record = await store.get(campaign_id)
    assert record.status == CampaignStatus.FAILED
    assert record.error is None
    assert StageName.RESEARCHER not in record.results
    assert StageName.COORDINATOR in record.results
    assert record.stage_statuses[StageName.COORDINATOR].status == StageState.COMPLETED


@pytest.mark.asyncio
async def test_driver_error_fails_campaign(store, product, settings):
    campaign_id = await store.create(product)
    pipeline = CampaignPipeline.build(store, TemplateProvider(), settings)

    async def explode(*args, **kwargs):
        raise RuntimeError("creator crashed")

    pipeline.creator.run = explode
    outputs = await pipeline.run(campaign_id, product)

    assert outputs == {"error": "creator crashed"}
    record = await store.get(campaign_id)
    assert record.status == CampaignStatus.FAILED
    assert record.error == "creator crashed"
    assert record.stage_statuses[StageName.COORDINATOR].status == StageState.PENDING
    assert all(
        s.status != StageState.RUNNING for s in record.stage_statuses.values()
    )


@pytest.mark.asyncio
async def test_runner_drains_queue(store, product, settings):
    pipeline = CampaignPipeline.build(store, TemplateProvider(), settings)
    runner = CampaignRunner(pipeline, workers=2)
    runner.start()
    try:
        ids = [await store.create(product) for _ in range(5)]
        for campaign_id in ids:
            await runner.submit(campaign_id, product)
        await asyncio.wait_for(runner.join(), timeout=5)
    finally:
        await runner.stop()

    for campaign_id in ids:
        assert (await store.get(campaign_id)).status == CampaignStatus.COMPLETED
    assert not runner.running


@pytest.mark.asyncio
async def test_runner_survives_unknown_campaign(store, product, settings):
    pipeline = CampaignPipeline.build(store, TemplateProvider(), settings)
    runner = CampaignRunner(pipeline, workers=1)
    runner.start()
    try:
        await runner.submit("ghost", product)
        good = await store.create(product)
        await runner.submit(good, product)
        await asyncio.wait_for(runner.join(), timeout=5)
    finally:
        await runner.stop()

    assert (await store.get(good)).status == CampaignStatus.COMPLETED


@pytest.mark.asyncio
async def test_eviction_job_removes_finished_campaigns(store, product, settings):
    campaign_id = await store.create(product)
    pipeline = CampaignPipeline.build(store, TemplateProvider(), settings)
    await pipeline.run(campaign_id, product)

    record = store._records[campaign_id]
    record.created_at = datetime.utcnow() - timedelta(minutes=90)

    assert await evict_expired(store, ttl_minutes=60) == 1
    assert await store.list_summaries() == []


@pytest.mark.asyncio
async def test_runner_fails_campaign_when_job_crashes(store, product, settings):
    pipeline = CampaignPipeline.build(store, TemplateProvider(), settings)

    async def crash(campaign_id, product):
        raise RuntimeError("worker lost")

    pipeline.run = crash
    runner = CampaignRunner(pipeline, workers=1)
    runner.start()
    try:
        campaign_id = await store.create(product)
        await runner.submit(campaign_id, product)
        await asyncio.wait_for(runner.join(), timeout=5)
    finally:
        await runner.stop()

    record = await store.get(campaign_id)
    assert record.status == CampaignStatus.FAILED
    assert record.error == "worker lost"


@pytest.mark.asyncio
async def test_unexpected_stage_error_leaves_no_stage_running(store, product, settings):
    class CrashingStrategy(TemplateProvider):
        async def complete(self, prompt, options):
            if options.mode == CompletionMode.STRATEGY:
                raise AttributeError("'NoneType' object has no attribute 'get'")
            return await super().complete(prompt, options)

    campaign_id = await store.create(product)
    pipeline = CampaignPipeline.build(store, CrashingStrategy(), settings)

    outputs = await pipeline.run(campaign_id, product)

    assert "NoneType" in outputs["error"]
    record = await store.get(campaign_id)
    assert record.status == CampaignStatus.FAILED
    states = {stage: s.status for stage, s in record.stage_statuses.items()}
    assert states[StageName.STRATEGIST] == StageState.FAILED
    assert states[StageName.RESEARCHER] == StageState.COMPLETED
    assert states[StageName.CREATOR] == StageState.PENDING
    assert StageState.RUNNING not in states.values()
