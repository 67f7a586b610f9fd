"""Campaign, stage and product data models (Pydantic)."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


class CampaignStatus(str, Enum):
    INITIALIZING = "initializing"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (CampaignStatus.COMPLETED, CampaignStatus.FAILED)


# Allowed forward moves of the overall campaign status
STATUS_TRANSITIONS: dict[CampaignStatus, set[CampaignStatus]] = {
    CampaignStatus.INITIALIZING: {
        CampaignStatus.RUNNING,
        CampaignStatus.FAILED,
    },
    CampaignStatus.RUNNING: {CampaignStatus.COMPLETED, CampaignStatus.FAILED},
    CampaignStatus.COMPLETED: set(),
    CampaignStatus.FAILED: set(),
}


class StageName(str, Enum):
    STRATEGIST = "strategist"
    RESEARCHER = "researcher"
    CREATOR = "creator"
    COORDINATOR = "coordinator"

    @property
    def result_alias(self) -> str:
        """Key the browser client reads this stage's payload under."""
        return RESULT_ALIASES[self]


RESULT_ALIASES: dict[StageName, str] = {
    StageName.STRATEGIST: "strategy",
    StageName.RESEARCHER: "research",
    StageName.CREATOR: "content",
    StageName.COORDINATOR: "coordination",
}

AGENT_COORDINATION = "Parallel strategy and research, then content and coordination"


class StageState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Request / response schemas
# ---------------------------------------------------------------------------
class ProductInput(BaseModel):
    """Product information submitted by the client to start a campaign."""

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    target_audience: str = Field(min_length=1)
    industry: str = "tech"

    model_config = {"str_strip_whitespace": True}

    @field_validator("industry", mode="before")
    @classmethod
    def _default_industry(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return "tech"
        return value


class StartCampaignResponse(BaseModel):
    campaign_id: str
    status: str = "started"
    message: str


# ---------------------------------------------------------------------------
# Store records
# ---------------------------------------------------------------------------
class StageStatus(BaseModel):
    """Progress of a single stage within one campaign run."""

    status: StageState = StageState.PENDING
    progress: int = Field(default=0, ge=0, le=100)
    message: Optional[str] = None
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class StagePatch(BaseModel):
    """Partial update merged into a StageStatus."""

    status: Optional[StageState] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    message: Optional[str] = None


class CampaignRecord(BaseModel):
    """Full status + result state for one submitted product."""

    id: str
    product: ProductInput
    status: CampaignStatus = CampaignStatus.INITIALIZING
    stage_statuses: dict[StageName, StageStatus] = Field(
        default_factory=lambda: {stage: StageStatus() for stage in StageName}
    )
    results: dict[StageName, dict[str, Any]] = Field(default_factory=dict)
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


# ---------------------------------------------------------------------------
# Wire views
# ---------------------------------------------------------------------------
class CampaignOut(BaseModel):
    """JSON shape returned by GET /campaign/{campaign_id}."""

    campaign_id: str
    status: CampaignStatus
    agents: dict[str, StageStatus]
    results: dict[str, Any]
    created_at: datetime

    @classmethod
    def from_record(
        cls, record: CampaignRecord, ai_model: Optional[str] = None
    ) -> "CampaignOut":
        results: dict[str, Any] = {}
        for stage, payload in record.results.items():
            results[stage.value] = payload
            results[stage.result_alias] = payload
        if record.error:
            results["error"] = record.error
        # Run-level metadata once the campaign has settled
        if record.status.terminal:
            results["agent_coordination"] = AGENT_COORDINATION
            results["workflow_status"] = record.status.value
            if ai_model:
                results["ai_model_used"] = ai_model
        return cls(
            campaign_id=record.id,
            status=record.status,
            agents={
                stage.value: status
                for stage, status in record.stage_statuses.items()
            },
            results=results,
            created_at=record.created_at,
        )


class CampaignSummary(BaseModel):
    campaign_id: str
    status: CampaignStatus
    product_name: str
    created_at: datetime
