"""Campaign pipeline — sequences the four stage agents for one campaign.

Strategist ∥ Researcher -> Creator -> Coordinator

Stage failures are reported by the agents themselves and do not stop the
run: later stages are prompted with whatever earlier output exists. The
campaign ends ``completed`` only when every stage completed; any stage
error ends it ``failed`` once all four stages have had their turn. An
exception escaping an agent is a driver error and fails the campaign
immediately.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

from zerotomarket.agents.base import StageInput
from zerotomarket.agents.coordinator_agent import CoordinatorAgent
from zerotomarket.agents.creator_agent import CreatorAgent
from zerotomarket.agents.researcher_agent import ResearcherAgent
from zerotomarket.agents.strategist_agent import StrategistAgent
from zerotomarket.config import Settings
from zerotomarket.models.campaign import CampaignStatus, ProductInput
from zerotomarket.services.campaign_store import (
    CampaignNotFound,
    CampaignStateError,
    CampaignStore,
)
from zerotomarket.services.llm_provider import CompletionProvider

logger = logging.getLogger(__name__)


class CampaignPipeline:
    """Runs one campaign through all four stages."""

    def __init__(
        self,
        store: CampaignStore,
        strategist: StrategistAgent,
        researcher: ResearcherAgent,
        creator: CreatorAgent,
        coordinator: CoordinatorAgent,
    ):
        self.store = store
        self.strategist = strategist
        self.researcher = researcher
        self.creator = creator
        self.coordinator = coordinator

    @classmethod
    def build(
        cls,
        store: CampaignStore,
        provider: CompletionProvider,
        settings: Settings,
    ) -> "CampaignPipeline":
        timeout = settings.provider_timeout_seconds
        return cls(
            store=store,
            strategist=StrategistAgent(store, provider, timeout),
            researcher=ResearcherAgent(store, provider, timeout),
            creator=CreatorAgent(
                store,
                provider,
                timeout,
                pacing_seconds=settings.creator_pacing_seconds,
            ),
            coordinator=CoordinatorAgent(store, provider, timeout),
        )

    async def run(self, campaign_id: str, product: ProductInput) -> dict[str, Any]:
        """Run every stage and settle the campaign's overall status.

        Returns:
            The four stage payloads keyed by stage name (error payloads for
            failed stages), or ``{"error": ...}`` on a driver error.
        """
        start = datetime.utcnow()
        try:
            await self.store.set_overall_status(campaign_id, CampaignStatus.RUNNING)
            logger.info("[%s] Phase 1: strategy and research", campaign_id)
            # Both stages settle before an unexpected error is re-raised
            phase_one = await asyncio.gather(
                self.strategist.run(campaign_id, StageInput(product=product)),
                self.researcher.run(campaign_id, StageInput(product=product)),
                return_exceptions=True,
            )
            for outcome in phase_one:
                if isinstance(outcome, BaseException):
                    raise outcome
            strategy, research = phase_one

            logger.info("[%s] Phase 2: content creation", campaign_id)
            content = await self.creator.run(
                campaign_id,
                StageInput(product=product, strategy=strategy, research=research),
            )

            logger.info("[%s] Phase 3: coordination", campaign_id)
            coordination = await self.coordinator.run(
                campaign_id,
                StageInput(
                    product=product,
                    strategy=strategy,
                    research=research,
                    content=content,
                ),
            )
        except Exception as e:
            logger.exception("[%s] Pipeline failed", campaign_id)
            await self.fail(campaign_id, str(e) or type(e).__name__)
            return {"error": str(e)}

        outputs = {
            "strategist": strategy,
            "researcher": research,
            "creator": content,
            "coordinator": coordination,
        }
        failed = [name for name, out in outputs.items() if "error" in out]
        final = CampaignStatus.FAILED if failed else CampaignStatus.COMPLETED
        await self.store.set_overall_status(campaign_id, final)

        duration_ms = int((datetime.utcnow() - start).total_seconds() * 1000)
        if failed:
            logger.warning(
                "[%s] Pipeline finished in %dms with failed stages: %s",
                campaign_id,
                duration_ms,
                ", ".join(failed),
            )
        else:
            logger.info("[%s] Pipeline complete in %dms", campaign_id, duration_ms)
        return outputs

    async def fail(self, campaign_id: str, message: str) -> None:
        """Mark a campaign failed unless it is already gone or terminal."""
        try:
            await self.store.set_overall_status(
                campaign_id, CampaignStatus.FAILED, error=message
            )
        except (CampaignNotFound, CampaignStateError) as e:
            # Gone or already terminal; keep the first outcome
            logger.error("[%s] Could not mark campaign failed: %s", campaign_id, e)
