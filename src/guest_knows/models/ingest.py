"""Ingestion result models for guest_knows.

The orchestrator records one StageResult per pipeline stage so callers
can tell exactly which stages ran, which failed, and why.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from guest_knows.models.knowledge import KnowledgeItem

__all__ = [
    "BookingItems",
    "DeliveryResult",
    "IngestResult",
    "IngestStage",
    "PropertyContext",
    "StageResult",
    "StageStatus",
    "SuggestedReply",
]


class IngestStage(StrEnum):
    """Pipeline stages after validation and normalization."""

    STORE = "store"
    SUGGEST = "suggest"
    NOTIFY = "notify"


class StageStatus(StrEnum):
    """Outcome of a single pipeline stage."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class StageResult:
    """Outcome of one stage, with a reason when it did not succeed."""

    stage: IngestStage
    status: StageStatus
    reason: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is StageStatus.SUCCEEDED


class SuggestedReply(BaseModel, frozen=True):
    """Draft reply for the host to review."""

    draft: str
    confidence: float = Field(ge=0.0, le=1.0)


class DeliveryResult(BaseModel, frozen=True):
    """Result of handing a draft to the notifier."""

    success: bool
    message_id: str | None = None
    error: str | None = None


class PropertyContext(BaseModel, frozen=True):
    """Property details available to the reply generator."""

    property_id: str
    property_name: str | None = None
    context_text: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


@dataclass(frozen=True)
class BookingItems:
    """Everything indexed under a booking."""

    thread_ids: list[str]
    items: list[KnowledgeItem]


@dataclass
class IngestResult:
    """Aggregated outcome of one webhook ingestion."""

    item: KnowledgeItem
    stages: list[StageResult] = field(default_factory=list)
    suggested_reply: SuggestedReply | None = None
    delivery: DeliveryResult | None = None

    @property
    def knowledge_item_id(self) -> str | None:
        """Assigned item ID, present only if the store stage succeeded."""
        stored = self.stage(IngestStage.STORE)
        if stored is None or not stored.ok:
            return None
        return self.item.id

    @property
    def has_suggested_reply(self) -> bool:
        return self.suggested_reply is not None

    def stage(self, name: IngestStage) -> StageResult | None:
        """Get the recorded result for a stage, if it ran or was skipped."""
        for result in self.stages:
            if result.stage == name:
                return result
        return None

    def record(self, stage: IngestStage, status: StageStatus, reason: str | None = None) -> None:
        self.stages.append(StageResult(stage=stage, status=status, reason=reason))

    def to_response(self) -> dict[str, Any]:
        """Render the webhook response body."""
        body: dict[str, Any] = {
            "status": "received",
            "has_suggested_reply": self.has_suggested_reply,
        }
        if self.knowledge_item_id:
            body["knowledge_item_id"] = self.knowledge_item_id
        return body
