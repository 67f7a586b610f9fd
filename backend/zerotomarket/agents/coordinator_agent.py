"""Coordinator Agent — readiness review and publishing plan for the campaign."""

from __future__ import annotations

from typing import Any

from zerotomarket.agents.base import StageAgent, StageInput
from zerotomarket.agents.parsing import extract_readiness_score
from zerotomarket.models.campaign import StageName, StageState
from zerotomarket.services.llm_provider import CompletionMode, CompletionOptions

OPTIMIZATION_PROMPT = """As a campaign coordinator, analyze this complete marketing campaign:

Product: {name}
Description: {description}
Target Audience: {target_audience}
Industry: {industry}
Strategy: {value_proposition}
Research Insights: {market_trends}
Content Created: {pieces} pieces

Provide:
1. Campaign Readiness Score (1-10)
2. Key Strengths (2 points)
3. Optimization Recommendations (2 points)
4. Publishing Timeline (when to post each piece)
5. Success Metrics to track

Be concise and actionable."""

RECOMMENDED_TIMELINE: dict[str, str] = {
    "twitter": "Post immediately for engagement",
    "linkedin": "Post during business hours",
    "blog": "Schedule for next week",
    "email": "Send to subscribers first",
}

SUCCESS_METRICS: list[str] = [
    "Engagement rate on social media",
    "Click-through rate from content",
    "Lead generation from campaign",
]


class CoordinatorAgent(StageAgent):
    """Scores campaign readiness and lays out the publishing timeline."""

    stage = StageName.COORDINATOR

    async def execute(self, campaign_id: str, data: StageInput) -> dict[str, Any]:
        product = data.product
        strategy = data.strategy or {}
        research = data.research or {}
        pieces: dict[str, str] = (data.content or {}).get("content") or {}

        prompt = OPTIMIZATION_PROMPT.format(
            name=product.name,
            description=product.description,
            target_audience=product.target_audience,
            industry=product.industry,
            value_proposition=strategy.get("value_proposition") or "No strategy",
            market_trends=research.get("market_trends") or "No research",
            pieces=len(pieces),
        )

        await self.report(campaign_id, StageState.RUNNING, 60, "optimizing")
        text = await self.complete(
            prompt,
            CompletionOptions(
                mode=CompletionMode.OPTIMIZATION, max_tokens=800, temperature=0.6
            ),
        )

        score = extract_readiness_score(text)
        ready = bool(pieces) and "error" not in strategy and "error" not in research
        final_campaign = {
            "campaign_id": campaign_id,
            "product_name": product.name,
            "readiness_score": score,
            "optimization_analysis": text,
            "content_pieces": len(pieces),
            "recommended_timeline": {
                platform: RECOMMENDED_TIMELINE.get(platform, "Schedule after launch")
                for platform in (pieces or RECOMMENDED_TIMELINE)
            },
            "success_metrics": list(SUCCESS_METRICS),
            "next_steps": (
                "Ready for publication across all channels"
                if ready
                else "Fill the missing campaign inputs before publishing"
            ),
        }
        return {
            "agent": self.stage.value,
            "readiness_score": score,
            "final_campaign": final_campaign,
            "campaign_ready": ready,
        }
