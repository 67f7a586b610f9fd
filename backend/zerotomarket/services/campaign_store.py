"""Campaign store — status records and stage results keyed by campaign id.

The store is an injected interface: request handlers and stage agents
receive a ``CampaignStore`` instance instead of touching a module global.
``InMemoryCampaignStore`` is the process-local implementation used by the
demo server and the tests; a shared cache could implement the same methods.
"""

from __future__ import annotations

import abc
import logging
import uuid
from datetime import datetime

from zerotomarket.models.campaign import (
    STATUS_TRANSITIONS,
    CampaignRecord,
    CampaignStatus,
    CampaignSummary,
    ProductInput,
    StageName,
    StagePatch,
    StageState,
)

logger = logging.getLogger(__name__)


class CampaignNotFound(LookupError):
    """Raised when a campaign id is unknown to the store."""

    def __init__(self, campaign_id: str):
        super().__init__(f"Campaign {campaign_id} not found")
        self.campaign_id = campaign_id


class CampaignStateError(ValueError):
    """Raised on a write that would break a record's lifecycle rules."""


class CampaignStore(abc.ABC):
    """Create/read/update interface over campaign records."""

    @abc.abstractmethod
    async def create(self, product: ProductInput) -> str:
        ...

    @abc.abstractmethod
    async def get(self, campaign_id: str) -> CampaignRecord:
        ...

    @abc.abstractmethod
    async def update_stage(
        self, campaign_id: str, stage: StageName, patch: StagePatch
    ) -> None:
        ...

    @abc.abstractmethod
    async def set_result(
        self, campaign_id: str, stage: StageName, payload: dict
    ) -> None:
        ...

    @abc.abstractmethod
    async def set_overall_status(
        self,
        campaign_id: str,
        status: CampaignStatus,
        error: str | None = None,
    ) -> None:
        ...

    @abc.abstractmethod
    async def list_summaries(self) -> list[CampaignSummary]:
        ...

    @abc.abstractmethod
    async def evict(self, older_than: datetime) -> int:
        ...


class InMemoryCampaignStore(CampaignStore):
    """Process-local store backed by a plain dict.

    All methods run on the event loop without awaiting in between reads and
    writes, so no lock is needed for a single-process asyncio server.
    """

    def __init__(self) -> None:
        self._records: dict[str, CampaignRecord] = {}

    async def create(self, product: ProductInput) -> str:
        campaign_id = str(uuid.uuid4())
        while campaign_id in self._records:
            campaign_id = str(uuid.uuid4())
        self._records[campaign_id] = CampaignRecord(id=campaign_id, product=product)
        logger.info("Campaign %s created for '%s'", campaign_id, product.name)
        return campaign_id

    async def get(self, campaign_id: str) -> CampaignRecord:
        record = self._records.get(campaign_id)
        if record is None:
            raise CampaignNotFound(campaign_id)
        return record.model_copy(deep=True)

    async def update_stage(
        self, campaign_id: str, stage: StageName, patch: StagePatch
    ) -> None:
        record = self._records.get(campaign_id)
        if record is None:
            logger.warning(
                "Stage update for unknown campaign %s (%s) ignored",
                campaign_id,
                stage.value,
            )
            return

        current = record.stage_statuses[stage]
        changes = patch.model_dump(exclude_none=True)
        # A new state without a message clears the previous one
        if "status" in changes and "message" not in changes:
            changes["message"] = None
        changes["updated_at"] = datetime.utcnow()
        record.stage_statuses[stage] = current.model_copy(update=changes)

    async def set_result(
        self, campaign_id: str, stage: StageName, payload: dict
    ) -> None:
        record = self._records.get(campaign_id)
        if record is None:
            logger.warning(
                "Result for unknown campaign %s (%s) dropped",
                campaign_id,
                stage.value,
            )
            return

        if record.stage_statuses[stage].status != StageState.COMPLETED:
            raise CampaignStateError(
                f"{stage.value} has not completed for campaign {campaign_id}"
            )
        if stage in record.results:
            raise CampaignStateError(
                f"{stage.value} result already stored for campaign {campaign_id}"
            )
        record.results[stage] = payload

    async def set_overall_status(
        self,
        campaign_id: str,
        status: CampaignStatus,
        error: str | None = None,
    ) -> None:
        record = self._records.get(campaign_id)
        if record is None:
            raise CampaignNotFound(campaign_id)

        if status not in STATUS_TRANSITIONS[record.status]:
            raise CampaignStateError(
                f"Campaign {campaign_id}: cannot move from "
                f"{record.status.value} to {status.value}"
            )
        record.status = status
        if error is not None:
            record.error = error

    async def list_summaries(self) -> list[CampaignSummary]:
        # dict order is creation order
        records = reversed(list(self._records.values()))
        return [
            CampaignSummary(
                campaign_id=r.id,
                status=r.status,
                product_name=r.product.name,
                created_at=r.created_at,
            )
            for r in records
        ]

    async def evict(self, older_than: datetime) -> int:
        expired = [
            cid
            for cid, r in self._records.items()
            if r.status.terminal and r.created_at < older_than
        ]
        for cid in expired:
            del self._records[cid]
        if expired:
            logger.info("Evicted %d finished campaigns", len(expired))
        return len(expired)
