"""Deterministic template provider for offline demos and tests.

Reads the ``Key: value`` lines the stage agents put into every prompt,
classifies the product, and fills a canned response from the
(mode, tag) template table. No network access, no randomness.
"""

from __future__ import annotations

import asyncio
import logging
import re

from zerotomarket.services.llm_provider import (
    CompletionMode,
    CompletionOptions,
    CompletionProvider,
)
from zerotomarket.services.product_classifier import ProductTag, classify_product

logger = logging.getLogger(__name__)

_FIELD_RE = re.compile(
    r"^(Product|Description|Target Audience|Target|Industry|Platform|Tone|Strategy):"
    r"[ \t]*(.*)$",
    re.MULTILINE,
)


class _Fields(dict):
    def __missing__(self, key: str) -> str:
        return ""


def parse_prompt_fields(prompt: str) -> dict[str, str]:
    """Collect ``Key: value`` lines from a stage prompt (first one wins)."""
    fields: dict[str, str] = {}
    for key, value in _FIELD_RE.findall(prompt):
        slot = key.lower().replace(" ", "_")
        fields.setdefault(slot, value.strip())
    if "target_audience" not in fields and "target" in fields:
        fields["target_audience"] = fields["target"]
    return fields


# ---------------------------------------------------------------------------
# Template table
# ---------------------------------------------------------------------------
_STRATEGY = {
    ProductTag.GENERIC: (
        "Value Proposition: {product} helps {target_audience} get results "
        "without the usual overhead.\n"
        "Marketing Angle: Lead with the time saved in the first week.\n"
        "Key Messaging Themes:\n"
        "- Faster time to value for {target_audience}\n"
        "- Built for the way {industry} teams already work\n"
        "- Proof through real customer outcomes\n"
        "Target Persona: A busy member of {target_audience} evaluating "
        "{industry} tools on a tight schedule.\n"
        "Recommended Tone: professional yet approachable"
    ),
    ProductTag.AUTOMOTIVE: (
        "Value Proposition: {product} makes electric driving effortless for "
        "{target_audience}.\n"
        "Marketing Angle: Range confidence and total cost of ownership.\n"
        "Key Messaging Themes:\n"
        "- Charge anxiety solved by a dense charging network\n"
        "- Lower running costs than combustion vehicles\n"
        "- Software that improves the car after purchase\n"
        "Target Persona: A tech-forward driver from {target_audience} "
        "weighing a switch to electric.\n"
        "Recommended Tone: confident and forward-looking"
    ),
    ProductTag.URL_SUPPLIED: (
        "Value Proposition: {product}, as presented on its product page, "
        "answers a concrete need for {target_audience}.\n"
        "Marketing Angle: Echo the strongest claim from the landing page.\n"
        "Key Messaging Themes:\n"
        "- Reuse the page headline as the campaign hook\n"
        "- Turn listed features into audience benefits\n"
        "- Drive traffic back to the product page\n"
        "Target Persona: A visitor from {target_audience} arriving from a "
        "shared link.\n"
        "Recommended Tone: clear and direct"
    ),
}

_RESEARCH = {
    ProductTag.GENERIC: (
        "Market Trends: Growing demand for {industry} solutions that "
        "automate routine work.\n"
        "Competitor Messaging:\n"
        "- Save time and increase efficiency\n"
        "- Built specifically for modern teams\n"
        "- Seamless integration with existing tools\n"
        "Pricing: Freemium entry tiers with per-seat upgrades.\n"
        "Recommendation: Focus on problem-solution fit messaging for "
        "{target_audience}."
    ),
    ProductTag.AUTOMOTIVE: (
        "Market Trends: EV adoption keeps climbing as charging "
        "infrastructure expands.\n"
        "Competitor Messaging:\n"
        "- Longest range in class\n"
        "- Zero emissions, zero compromise\n"
        "- Over-the-air updates keep the car new\n"
        "Pricing: Premium pricing offset by tax incentives and lower fuel "
        "costs.\n"
        "Recommendation: Lead with ownership cost comparisons for "
        "{target_audience}."
    ),
    ProductTag.URL_SUPPLIED: (
        "Market Trends: Shoppers compare product pages side by side before "
        "buying.\n"
        "Competitor Messaging:\n"
        "- Social proof above the fold\n"
        "- Clear pricing and guarantees\n"
        "- Short demo videos\n"
        "Pricing: Visible list price with limited-time offers.\n"
        "Recommendation: Mirror the product page structure in every channel "
        "for {target_audience}."
    ),
}

_CONTENT = {
    "twitter": (
        "{product} is here for {target_audience}. {angle} "
        "#{industry_tag} #productivity #launch"
    ),
    "linkedin": (
        "{target_audience} told us the same thing over and over: the tools "
        "slow them down. {product} changes that. {angle}"
    ),
    "blog": (
        "Headline: How {product} Changes the Game for {target_audience}\n"
        "Preview: We built {product} after watching {industry} teams lose "
        "hours every week. Here is what we learned."
    ),
    "email": (
        "Subject: Meet {product}, built for {target_audience}\n"
        "Opening: If you have ever wished your {industry} tools just got out "
        "of the way, this one is for you."
    ),
}

_AUTOMOTIVE_CONTENT = {
    "twitter": (
        "Range anxiety? Not with {product}. Charge, drive, repeat. "
        "#EV #electricvehicles #{industry_tag}"
    ),
}

_OPTIMIZATION = {
    ProductTag.GENERIC: (
        "Campaign Readiness Score: 8/10\n"
        "Key Strengths:\n"
        "- Clear value proposition for {target_audience}\n"
        "- Consistent messaging across channels\n"
        "Optimization Recommendations:\n"
        "- Add a customer proof point to the LinkedIn post\n"
        "- A/B test two email subject lines\n"
        "Publishing Timeline: Twitter today, LinkedIn during business hours, "
        "blog next week, email to subscribers first."
    ),
    ProductTag.AUTOMOTIVE: (
        "Campaign Readiness Score: 9/10\n"
        "Key Strengths:\n"
        "- Strong range and cost story\n"
        "- Timely fit with EV adoption trends\n"
        "Optimization Recommendations:\n"
        "- Include a charging map visual\n"
        "- Partner with local charging providers for launch\n"
        "Publishing Timeline: Social first, then long-form ownership guide."
    ),
    ProductTag.URL_SUPPLIED: (
        "Campaign Readiness Score: 7/10\n"
        "Key Strengths:\n"
        "- Messaging anchored in existing page copy\n"
        "- Every piece links back to the product page\n"
        "Optimization Recommendations:\n"
        "- Confirm the product page claims before publishing\n"
        "- Add UTM parameters per channel\n"
        "Publishing Timeline: Stagger posts over three days."
    ),
}


class TemplateProvider(CompletionProvider):
    """Canned responses selected by product classification."""

    name = "template"
    model = "canned-v1"

    def __init__(self, latency_seconds: float = 0.0):
        self.latency_seconds = latency_seconds

    async def complete(self, prompt: str, options: CompletionOptions) -> str:
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        fields = parse_prompt_fields(prompt)
        tag = classify_product(
            " ".join([fields.get("product", ""), fields.get("description", "")])
        )
        logger.debug("TemplateProvider: %s response for %s", options.mode.value, tag.value)
        return self.render(options.mode, tag, fields)

    @staticmethod
    def render(mode: CompletionMode, tag: ProductTag, fields: dict[str, str]) -> str:
        values = _Fields(fields)
        values.setdefault("product", "the product")
        values.setdefault("target_audience", "your audience")
        values.setdefault("industry", "tech")
        values["industry_tag"] = re.sub(r"\W", "", values["industry"]) or "tech"
        values["angle"] = values.get("strategy") or "Built to save you time."

        if mode == CompletionMode.STRATEGY:
            template = _STRATEGY[tag]
        elif mode == CompletionMode.RESEARCH:
            template = _RESEARCH[tag]
        elif mode == CompletionMode.OPTIMIZATION:
            template = _OPTIMIZATION[tag]
        else:
            platform = values.get("platform", "twitter").lower()
            template = None
            if tag == ProductTag.AUTOMOTIVE:
                template = _AUTOMOTIVE_CONTENT.get(platform)
            if template is None:
                template = _CONTENT.get(platform, _CONTENT["twitter"])
        return template.format_map(values)
