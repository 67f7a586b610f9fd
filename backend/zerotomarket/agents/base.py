"""Shared plumbing for the four stage agents.

Every agent follows the same contract:

1. mark its stage ``running`` in the campaign store
2. build prompts from the stage input and call the completion provider
3. shape the text into a result payload
4. mark the stage ``completed`` and store the payload

Provider failures (errors, timeouts, malformed responses) never escape
``run``: the stage is marked ``failed`` and an ``{"agent", "error"}``
payload is returned so the pipeline can keep going with partial data.
Anything else marks the stage ``failed`` and propagates to the pipeline
driver.
"""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import Any, Optional

from pydantic import BaseModel

from zerotomarket.models.campaign import (
    ProductInput,
    StageName,
    StagePatch,
    StageState,
)
from zerotomarket.services.campaign_store import CampaignStore
from zerotomarket.services.llm_provider import (
    CompletionOptions,
    CompletionProvider,
    ProviderError,
)

logger = logging.getLogger(__name__)


class StageInput(BaseModel):
    """Product data plus the outputs of earlier stages."""

    product: ProductInput
    strategy: Optional[dict[str, Any]] = None
    research: Optional[dict[str, Any]] = None
    content: Optional[dict[str, Any]] = None


class StageAgent(abc.ABC):
    """Base class for a pipeline stage backed by a completion provider."""

    stage: StageName

    def __init__(
        self,
        store: CampaignStore,
        provider: CompletionProvider,
        timeout_seconds: float = 45.0,
    ):
        self.store = store
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    async def run(self, campaign_id: str, data: StageInput) -> dict[str, Any]:
        logger.info("[%s] %s starting", campaign_id, self.stage.value)
        await self.report(campaign_id, StageState.RUNNING, 20)

        try:
            result = await self.execute(campaign_id, data)
        except ProviderError as e:
            logger.error("[%s] %s failed: %s", campaign_id, self.stage.value, e)
            await self.report(campaign_id, StageState.FAILED, 0, str(e))
            return {"agent": self.stage.value, "error": str(e)}
        except Exception as e:
            # Leave no stage stuck in running; the driver fails the campaign
            await self.report(
                campaign_id, StageState.FAILED, 0, str(e) or type(e).__name__
            )
            raise

        await self.report(campaign_id, StageState.COMPLETED, 100)
        await self.store.set_result(campaign_id, self.stage, result)
        logger.info("[%s] %s completed", campaign_id, self.stage.value)
        return result

    @abc.abstractmethod
    async def execute(self, campaign_id: str, data: StageInput) -> dict[str, Any]:
        """Produce this stage's result payload; may raise ProviderError."""

    async def report(
        self,
        campaign_id: str,
        state: StageState,
        progress: int,
        message: str | None = None,
    ) -> None:
        await self.store.update_stage(
            campaign_id,
            self.stage,
            StagePatch(status=state, progress=progress, message=message),
        )

    async def complete(self, prompt: str, options: CompletionOptions) -> str:
        """Call the provider with the per-call timeout applied."""
        try:
            return await asyncio.wait_for(
                self.provider.complete(prompt, options),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ProviderError(
                self.provider.name,
                f"no response within {self.timeout_seconds:g}s",
            ) from e
