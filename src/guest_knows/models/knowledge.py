"""Knowledge item models for guest_knows.

A knowledge item is the persisted, normalized record of one ingested
email thread snapshot.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "SCHEMA_VERSION",
    "ContentType",
    "IngestMethod",
    "KnowledgeItem",
    "LatestGuestMessage",
    "NormalizedThread",
    "Platform",
    "SourceType",
]

SCHEMA_VERSION = "1.0.0"


class SourceType(StrEnum):
    """Where an ingested item came from."""

    GMAIL_WEBHOOK = "gmail_webhook"
    UPLISTING_API = "uplisting_api"
    MANUAL_UPLOAD = "manual_upload"


class ContentType(StrEnum):
    """Kind of content held by a knowledge item."""

    EMAIL_MESSAGE = "email_message"
    DOCUMENT = "document"
    IMAGE = "image"
    NOTE = "note"


class IngestMethod(StrEnum):
    """How an item entered the system."""

    WEBHOOK = "webhook"
    API_SYNC = "api_sync"
    MANUAL_UPLOAD = "manual_upload"


class Platform(StrEnum):
    """Booking channel a guest message arrived through."""

    AIRBNB = "airbnb"
    VRBO = "vrbo"
    DIRECT = "direct"


class LatestGuestMessage(BaseModel):
    """Guest-authored text extracted from the most recent qualifying email."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    date: str
    from_address: str = Field(alias="from")
    subject: str | None = None
    body_plain: str = Field(alias="bodyPlain", min_length=1)


class NormalizedThread(BaseModel):
    """Derived view over a thread's raw messages.

    Attributes:
        latest_guest_message: Most recent message with recoverable guest text
        full_thread_text: Chronological audit rendering of every message
        message_count: Number of raw messages at normalization time
        subject: Thread subject
        from_address: Sender of the latest message (wire name ``from``)
        to: Recipients of the latest message
        timestamps: Message dates in payload order
        has_guest_question: Whether the guest text reads as a question
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    latest_guest_message: LatestGuestMessage | None = None
    full_thread_text: str = ""
    message_count: int = Field(ge=0)
    subject: str = "No Subject"
    from_address: str | None = Field(default=None, alias="from")
    to: str | None = None
    timestamps: list[str] = Field(default_factory=list)
    has_guest_question: bool = False


class KnowledgeItem(BaseModel):
    """Persisted knowledge item.

    ``id`` is None until the item is first stored; the model is frozen,
    so the store hands back a copy carrying the assigned ID.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str | None = None
    schema_version: str = SCHEMA_VERSION
    source: str = SourceType.GMAIL_WEBHOOK
    ingest_method: IngestMethod = IngestMethod.WEBHOOK
    content_type: ContentType = ContentType.EMAIL_MESSAGE
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    property_id: str | None = None
    booking_id: str | None = None
    external_thread_id: str | None = None
    platform: Platform | None = None
    platform_thread_id: str | None = None

    raw_payload: dict[str, Any] = Field(default_factory=dict)
    normalized: NormalizedThread

    def to_document(self) -> dict[str, Any]:
        """Serialize with wire field names, JSON-compatible."""
        return self.model_dump(mode="json", by_alias=True)
