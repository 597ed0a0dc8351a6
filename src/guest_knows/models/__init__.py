"""Public models for guest_knows.

This module exports the inbound email, knowledge item and ingestion result models.
"""

from guest_knows.models.email import EmailMessage, WebhookPayload
from guest_knows.models.ingest import (
    BookingItems,
    DeliveryResult,
    IngestResult,
    IngestStage,
    PropertyContext,
    StageResult,
    StageStatus,
    SuggestedReply,
)
from guest_knows.models.knowledge import (
    SCHEMA_VERSION,
    ContentType,
    IngestMethod,
    KnowledgeItem,
    LatestGuestMessage,
    NormalizedThread,
    Platform,
    SourceType,
)

__all__ = [
    "SCHEMA_VERSION",
    "BookingItems",
    "ContentType",
    "DeliveryResult",
    "EmailMessage",
    "IngestMethod",
    "IngestResult",
    "IngestStage",
    "KnowledgeItem",
    "LatestGuestMessage",
    "NormalizedThread",
    "Platform",
    "PropertyContext",
    "SourceType",
    "StageResult",
    "StageStatus",
    "SuggestedReply",
    "WebhookPayload",
]
