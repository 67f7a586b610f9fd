"""FastAPI application entry point for the ZeroToMarket backend.

Multi-agent marketing campaign service — a strategist, researcher,
creator and coordinator turn one product description into a campaign
that the browser client polls for progress.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from zerotomarket.api import campaigns
from zerotomarket.config import Settings, settings as default_settings
from zerotomarket.orchestrator.pipeline import CampaignPipeline
from zerotomarket.orchestrator.runner import CampaignRunner
from zerotomarket.orchestrator.scheduler import start_scheduler, stop_scheduler
from zerotomarket.services.campaign_store import (
    CampaignNotFound,
    CampaignStore,
    InMemoryCampaignStore,
)
from zerotomarket.services.llm_provider import CompletionProvider, build_provider

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)-25s | %(levelname)-7s | %(message)s",
)
logger = logging.getLogger("zerotomarket")

AGENT_NAMES = ["StrategistAgent", "ResearcherAgent", "CreatorAgent", "CoordinatorAgent"]


def create_app(
    settings: Settings | None = None,
    store: CampaignStore | None = None,
    provider: CompletionProvider | None = None,
) -> FastAPI:
    """Build the app; tests inject their own store and provider."""
    settings = settings or default_settings

    # -----------------------------------------------------------------------
    # Lifespan
    # -----------------------------------------------------------------------
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ── Startup ──
        logger.info("ZeroToMarket backend starting up...")

        app.state.settings = settings
        app.state.store = store or InMemoryCampaignStore()
        app.state.provider = provider or build_provider(settings)
        if not settings.provider_configured:
            # Non-fatal: stage calls fail individually until a key is set
            logger.warning(
                "No API key configured for LLM_PROVIDER=%s; campaigns will fail per stage",
                settings.llm_provider,
            )

        pipeline = CampaignPipeline.build(
            app.state.store, app.state.provider, settings
        )
        app.state.runner = CampaignRunner(pipeline, workers=settings.pipeline_workers)
        app.state.runner.start()

        scheduler = None
        try:
            scheduler = start_scheduler(app.state.store, settings)
        except Exception as e:
            logger.warning("Scheduler failed to start: %s", e)

        logger.info("Agents ready: %s (%s)", ", ".join(AGENT_NAMES), app.state.provider.label)

        yield

        # ── Shutdown ──
        stop_scheduler(scheduler)
        await app.state.runner.stop()
        logger.info("ZeroToMarket backend shut down cleanly")

    # -----------------------------------------------------------------------
    # App
    # -----------------------------------------------------------------------
    app = FastAPI(
        title="ZeroToMarket",
        description=(
            "Multi-agent marketing campaign generator. Strategist and "
            "researcher agents run in parallel, then a creator writes "
            "platform copy and a coordinator scores campaign readiness."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS (allow frontend)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    @app.exception_handler(CampaignNotFound)
    async def campaign_not_found(request: Request, exc: CampaignNotFound):
        return JSONResponse(status_code=404, content={"error": "Campaign not found"})

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    app.include_router(campaigns.router)

    @app.get("/health")
    async def health(request: Request):
        active = request.app.state.provider
        return {
            "status": "healthy",
            "message": "ZeroToMarket AI Backend Ready",
            "agents": AGENT_NAMES,
            "ai_model": active.label,
            "provider": active.name,
            "openai_configured": bool(settings.openai_api_key),
            "timestamp": datetime.utcnow().isoformat(),
        }

    return app


app = create_app()
