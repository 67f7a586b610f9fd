"""Scheduler — APScheduler-based sweep that evicts finished campaigns.

Terminal campaigns older than the configured TTL are dropped from the
store at a fixed interval (default: every 15 minutes).
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from zerotomarket.config import Settings
from zerotomarket.services.campaign_store import CampaignStore

logger = logging.getLogger(__name__)


async def evict_expired(store: CampaignStore, ttl_minutes: int) -> int:
    """Scheduled job: drop finished campaigns older than the TTL."""
    cutoff = datetime.utcnow() - timedelta(minutes=ttl_minutes)
    try:
        evicted = await store.evict(older_than=cutoff)
    except Exception as e:
        logger.error("Scheduler: eviction failed: %s", e)
        return 0
    logger.info("Scheduler: eviction sweep removed %d campaigns", evicted)
    return evicted


def start_scheduler(store: CampaignStore, settings: Settings) -> AsyncIOScheduler | None:
    """Start the eviction sweep; returns None when eviction is disabled."""
    if settings.campaign_ttl_minutes <= 0:
        logger.info("Scheduler disabled (CAMPAIGN_TTL_MINUTES=0)")
        return None

    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        evict_expired,
        trigger=IntervalTrigger(minutes=settings.eviction_interval_minutes),
        args=[store, settings.campaign_ttl_minutes],
        id="campaign_eviction",
        name="Campaign Eviction",
        replace_existing=True,
    )
    scheduler.start()
    logger.info(
        "Scheduler started — evicting campaigns older than %d minutes every %d minutes",
        settings.campaign_ttl_minutes,
        settings.eviction_interval_minutes,
    )
    return scheduler


def stop_scheduler(scheduler: AsyncIOScheduler | None) -> None:
    """Stop the background scheduler."""
    if scheduler is not None:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
