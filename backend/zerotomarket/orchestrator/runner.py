"""Campaign runner — queue of pipeline jobs drained by worker tasks.

The HTTP handler only enqueues; workers started in the app lifespan pick
jobs up and drive the pipeline, so request latency never depends on the
completion provider.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from zerotomarket.models.campaign import ProductInput
from zerotomarket.orchestrator.pipeline import CampaignPipeline

logger = logging.getLogger(__name__)


@dataclass
class PipelineJob:
    campaign_id: str
    product: ProductInput


class CampaignRunner:
    """Fixed pool of workers consuming pipeline jobs."""

    def __init__(self, pipeline: CampaignPipeline, workers: int = 4):
        self.pipeline = pipeline
        self.workers = max(1, workers)
        self._queue: asyncio.Queue[PipelineJob] = asyncio.Queue()
        self._tasks: list[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def start(self) -> None:
        if self._tasks:
            return
        self._tasks = [
            asyncio.create_task(self._worker(i), name=f"campaign-worker-{i}")
            for i in range(self.workers)
        ]
        logger.info("Campaign runner started with %d workers", self.workers)

    async def submit(self, campaign_id: str, product: ProductInput) -> None:
        await self._queue.put(PipelineJob(campaign_id, product))
        logger.info(
            "Campaign %s queued (%d waiting)", campaign_id, self._queue.qsize()
        )

    async def join(self) -> None:
        """Wait until every queued job has been processed."""
        await self._queue.join()

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Campaign runner stopped")

    async def _worker(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.pipeline.run(job.campaign_id, job.product)
            except Exception as e:
                logger.exception(
                    "Worker %d: campaign %s crashed outside the pipeline",
                    index,
                    job.campaign_id,
                )
                await self.pipeline.fail(job.campaign_id, str(e) or type(e).__name__)
            finally:
                self._queue.task_done()
