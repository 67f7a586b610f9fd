"""Strategist Agent — positioning and messaging strategy for a product."""

from __future__ import annotations

from typing import Any

from zerotomarket.agents.base import StageAgent, StageInput
from zerotomarket.agents.parsing import extract_bullets, extract_labeled
from zerotomarket.models.campaign import StageName, StageState
from zerotomarket.services.llm_provider import CompletionMode, CompletionOptions

STRATEGY_PROMPT = """Act as a senior marketing strategist. Analyze this product:

Product: {name}
Description: {description}
Target Audience: {target_audience}
Industry: {industry}

Provide a strategic analysis with:
1. Unique Value Proposition (1 sentence)
2. Marketing Angle (1 sentence)
3. Key Messaging Themes (3 bullet points)
4. Target Persona Details
5. Recommended Tone (professional/casual/technical)

Be specific and actionable."""


class StrategistAgent(StageAgent):
    """Turns product input into a value proposition, angle and themes."""

    stage = StageName.STRATEGIST

    async def execute(self, campaign_id: str, data: StageInput) -> dict[str, Any]:
        product = data.product
        prompt = STRATEGY_PROMPT.format(**product.model_dump())

        await self.report(campaign_id, StageState.RUNNING, 60, "generating")
        text = await self.complete(
            prompt,
            CompletionOptions(
                mode=CompletionMode.STRATEGY, max_tokens=1000, temperature=0.7
            ),
        )

        themes = extract_bullets(text, limit=3) or [
            f"Immediate value for {product.target_audience}",
            f"Purpose-built for {product.industry}",
            "Simple to adopt, easy to trust",
        ]
        return {
            "agent": self.stage.value,
            "strategy_content": text,
            "value_proposition": (
                extract_labeled(text, "Value Proposition")
                or f"The go-to {product.name} for {product.target_audience}"
            ),
            "marketing_angle": (
                extract_labeled(text, "Marketing Angle")
                or "Focus on immediate problem-solving value"
            ),
            "messaging_themes": themes,
            "tone": (
                extract_labeled(text, "Recommended Tone")
                or "professional yet approachable"
            ),
            "target_persona": (
                extract_labeled(text, "Target Persona")
                or f"Busy {product.target_audience} looking for efficient solutions"
            ),
        }
