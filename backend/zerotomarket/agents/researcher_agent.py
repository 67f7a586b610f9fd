"""Researcher Agent — competitive landscape and market trends."""

from __future__ import annotations

from typing import Any

from zerotomarket.agents.base import StageAgent, StageInput
from zerotomarket.agents.parsing import extract_bullets, extract_labeled
from zerotomarket.models.campaign import StageName, StageState
from zerotomarket.services.llm_provider import CompletionMode, CompletionOptions

RESEARCH_PROMPT = """Act as a market research specialist. Analyze the competitive landscape for:

Product: {name}
Description: {description}
Industry: {industry}
Target Audience: {target_audience}

Provide competitive intelligence including:
1. Market trends in this space
2. Common competitor messaging patterns
3. Pricing strategies observed
4. Content marketing approaches
5. Recommendations based on market analysis

Focus on actionable competitive insights."""


class ResearcherAgent(StageAgent):
    """Produces market analysis plus competitor messaging patterns."""

    stage = StageName.RESEARCHER

    async def execute(self, campaign_id: str, data: StageInput) -> dict[str, Any]:
        product = data.product
        prompt = RESEARCH_PROMPT.format(**product.model_dump())

        await self.report(campaign_id, StageState.RUNNING, 60, "analyzing")
        text = await self.complete(
            prompt,
            CompletionOptions(
                mode=CompletionMode.RESEARCH, max_tokens=1000, temperature=0.5
            ),
        )

        return {
            "agent": self.stage.value,
            "market_analysis": text,
            "competitor_insights": {
                "successful_headlines": [
                    f"Revolutionary {product.industry} solution",
                    f"Streamline your {product.target_audience} workflow",
                    "10x productivity with AI automation",
                ],
                "common_messaging": extract_bullets(text, limit=3) or [
                    "Save time and increase efficiency",
                    "Built specifically for modern teams",
                    "Seamless integration with existing tools",
                ],
                "engagement_patterns": {
                    "best_posting_times": ["9AM", "2PM", "6PM"],
                    "effective_hashtags": [
                        "#productivity",
                        "#automation",
                        "#innovation",
                    ],
                    "content_length": {
                        "twitter": "150-200 chars",
                        "linkedin": "2-3 sentences",
                    },
                },
            },
            "market_trends": (
                extract_labeled(text, "Market Trends")
                or f"Growing demand for {product.industry} solutions"
            ),
            "content_recommendations": (
                extract_labeled(text, "Recommendation")
                or "Focus on problem-solution fit messaging"
            ),
        }
