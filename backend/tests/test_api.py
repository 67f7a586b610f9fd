"""HTTP surface: campaign creation, polling, validation and health."""

from __future__ import annotations

import uuid
from datetime import datetime

import pytest

from conftest import ACME, FailingProvider, GatedProvider, wait_for_terminal
from zerotomarket.services.llm_provider import CompletionMode


class TestHealth:
    @pytest.mark.asyncio
    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["agents"] == [
            "StrategistAgent",
            "ResearcherAgent",
            "CreatorAgent",
            "CoordinatorAgent",
        ]
        assert data["provider"] == "template"
        assert data["openai_configured"] is False
        datetime.fromisoformat(data["timestamp"])

    @pytest.mark.asyncio
    async def test_cors_allows_local_frontend(self, client):
        resp = await client.get("/health", headers={"Origin": "http://localhost:3000"})
        assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"

    @pytest.mark.asyncio
    async def test_cors_rejects_other_origins(self, client):
        resp = await client.get("/health", headers={"Origin": "http://evil.example"})
        assert "access-control-allow-origin" not in resp.headers


class TestStartCampaign:
    @pytest.mark.asyncio
    async def test_returns_immediately_and_is_retrievable(self, make_client):
        provider = GatedProvider()
        async with make_client(provider) as client:
            resp = await client.post("/start-campaign", json=ACME)
            assert resp.status_code == 200
            body = resp.json()
            assert body["status"] == "started"
            assert body["message"]
            uuid.UUID(body["campaign_id"])

            status = await client.get(f"/campaign/{body['campaign_id']}")
            assert status.status_code == 200
            assert status.json()["status"] in ("initializing", "running")

            provider.gate.set()
            data = await wait_for_terminal(client, body["campaign_id"])
            assert data["status"] == "completed"

    @pytest.mark.asyncio
    async def test_acme_rocket_scenario(self, client):
        resp = await client.post("/start-campaign", json=ACME)
        campaign_id = resp.json()["campaign_id"]

        data = await wait_for_terminal(client, campaign_id)

        assert data["campaign_id"] == campaign_id
        assert data["status"] == "completed"
        results = data["results"]
        assert isinstance(results["strategist"], dict) and results["strategist"]
        assert isinstance(results["researcher"], dict) and results["researcher"]
        assert set(results["content"]["content"]) & {"twitter", "linkedin", "blog", "email"}
        assert isinstance(results["coordination"]["readiness_score"], (int, float))
        assert results["workflow_status"] == "completed"
        assert results["agent_coordination"]
        assert results["ai_model_used"] == "template canned-v1"
        for stage in ("strategist", "researcher", "creator", "coordinator"):
            assert data["agents"][stage]["status"] == "completed"
            assert data["agents"][stage]["progress"] == 100

    @pytest.mark.asyncio
    async def test_industry_defaults_to_tech(self, client, store):
        body = {k: v for k, v in ACME.items() if k != "industry"}
        resp = await client.post("/start-campaign", json=body)
        record = await store.get(resp.json()["campaign_id"])
        assert record.product.industry == "tech"

    @pytest.mark.asyncio
    async def test_missing_description_is_rejected(self, client, store):
        body = {k: v for k, v in ACME.items() if k != "description"}
        resp = await client.post("/start-campaign", json=body)

        assert resp.status_code == 422
        assert "campaign_id" not in resp.json()
        fields = [err["loc"][-1] for err in resp.json()["detail"]]
        assert "description" in fields
        assert await store.list_summaries() == []

    @pytest.mark.asyncio
    async def test_blank_required_field_is_rejected(self, client, store):
        resp = await client.post(
            "/start-campaign", json={**ACME, "target_audience": "   "}
        )
        assert resp.status_code == 422
        assert await store.list_summaries() == []


class TestGetCampaign:
    @pytest.mark.asyncio
    async def test_unknown_campaign_is_404(self, client):
        resp = await client.get("/campaign/not-a-real-id")
        assert resp.status_code == 404
        assert resp.json() == {"error": "Campaign not found"}

    @pytest.mark.asyncio
    async def test_reads_have_no_side_effects(self, make_client):
        provider = GatedProvider()
        async with make_client(provider) as client:
            resp = await client.post("/start-campaign", json=ACME)
            campaign_id = resp.json()["campaign_id"]

            first = (await client.get(f"/campaign/{campaign_id}")).json()
            second = (await client.get(f"/campaign/{campaign_id}")).json()
            assert first["agents"] == second["agents"]
            assert first["results"] == second["results"] == {}

            provider.gate.set()
            await wait_for_terminal(client, campaign_id)

    @pytest.mark.asyncio
    async def test_terminal_status_is_stable(self, client):
        resp = await client.post("/start-campaign", json=ACME)
        campaign_id = resp.json()["campaign_id"]
        data = await wait_for_terminal(client, campaign_id)

        for _ in range(3):
            again = (await client.get(f"/campaign/{campaign_id}")).json()
            assert again["status"] == data["status"]

    @pytest.mark.asyncio
    async def test_stage_completion_order(self, client):
        resp = await client.post("/start-campaign", json=ACME)
        data = await wait_for_terminal(client, resp.json()["campaign_id"])

        stamp = {
            stage: datetime.fromisoformat(info["updated_at"])
            for stage, info in data["agents"].items()
        }
        assert stamp["creator"] > stamp["strategist"]
        assert stamp["creator"] > stamp["researcher"]
        assert stamp["coordinator"] > stamp["creator"]

    @pytest.mark.asyncio
    async def test_stage_failure_marks_campaign_failed(self, make_client):
        async with make_client(FailingProvider(CompletionMode.STRATEGY)) as client:
            resp = await client.post("/start-campaign", json=ACME)
            data = await wait_for_terminal(client, resp.json()["campaign_id"])

        assert data["status"] == "failed"
        strategist = data["agents"]["strategist"]
        assert strategist["status"] == "failed"
        assert strategist["progress"] == 0
        assert "strategy unavailable" in strategist["message"]
        assert "strategist" not in data["results"]
        # Later stages still ran on partial input
        assert data["agents"]["creator"]["status"] == "completed"
        assert "coordination" in data["results"]
        assert data["results"]["workflow_status"] == "failed"


class TestListCampaigns:
    @pytest.mark.asyncio
    async def test_lists_newest_first(self, client):
        first = (await client.post("/start-campaign", json=ACME)).json()["campaign_id"]
        second = (
            await client.post("/start-campaign", json={**ACME, "name": "Beta Rocket"})
        ).json()["campaign_id"]

        resp = await client.get("/campaigns")
        ids = [c["campaign_id"] for c in resp.json()["campaigns"]]
        assert ids == [second, first]
        assert resp.json()["campaigns"][0]["product_name"] == "Beta Rocket"
