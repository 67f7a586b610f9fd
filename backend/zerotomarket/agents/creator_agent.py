"""Creator Agent — platform-specific copy built on strategy and research.

Issues one completion per target platform and aggregates the pieces
keyed by platform name.
"""

from __future__ import annotations

import asyncio
from typing import Any

from zerotomarket.agents.base import StageAgent, StageInput
from zerotomarket.models.campaign import StageName, StageState
from zerotomarket.services.campaign_store import CampaignStore
from zerotomarket.services.llm_provider import (
    CompletionMode,
    CompletionOptions,
    CompletionProvider,
)

PLATFORMS: list[str] = ["twitter", "linkedin", "blog", "email"]

PLATFORM_GUIDELINES: dict[str, str] = {
    "twitter": "280 chars max, engaging, 2-3 hashtags",
    "linkedin": "Professional, 2-3 sentences, value-focused",
    "blog": "Compelling headline and 2-sentence preview",
    "email": "Subject line + opening sentence",
}

CONTENT_PROMPT = """Create {platform} content for:

Platform: {platform}
Product: {name}
Description: {description}
Strategy: {angle}
Target: {target_audience}
Tone: {tone}

Platform Guidelines: {guidelines}

Create compelling, specific content that resonates with the target audience."""


class CreatorAgent(StageAgent):
    """Writes one piece of copy per platform."""

    stage = StageName.CREATOR

    def __init__(
        self,
        store: CampaignStore,
        provider: CompletionProvider,
        timeout_seconds: float = 45.0,
        pacing_seconds: float = 0.2,
        platforms: list[str] | None = None,
    ):
        super().__init__(store, provider, timeout_seconds)
        self.pacing_seconds = pacing_seconds
        self.platforms = platforms or list(PLATFORMS)

    async def execute(self, campaign_id: str, data: StageInput) -> dict[str, Any]:
        product = data.product
        strategy = data.strategy or {}
        content: dict[str, str] = {}

        for i, platform in enumerate(self.platforms):
            await self.report(
                campaign_id,
                StageState.RUNNING,
                20 + i * 20,
                f"creating {platform}",
            )
            prompt = CONTENT_PROMPT.format(
                platform=platform,
                name=product.name,
                description=product.description,
                angle=strategy.get("marketing_angle") or "Focus on value",
                target_audience=product.target_audience,
                tone=strategy.get("tone") or "professional",
                guidelines=PLATFORM_GUIDELINES.get(platform, "Platform-native format"),
            )
            text = await self.complete(
                prompt,
                CompletionOptions(
                    mode=CompletionMode.CONTENT, max_tokens=300, temperature=0.8
                ),
            )
            content[platform] = text.strip()

            # Pacing between calls only
            if self.pacing_seconds and i < len(self.platforms) - 1:
                await asyncio.sleep(self.pacing_seconds)

        return {
            "agent": self.stage.value,
            "content": content,
            "content_strategy": "Multi-platform value-driven messaging",
            "optimization": "Tailored for audience engagement patterns",
        }
