"""Thread normalization service for guest_knows.

This module turns a validated webhook payload into a KnowledgeItem:
it finds the latest guest-authored text, renders the thread for audit,
classifies whether the guest asked something, and resolves the
correlation keys.
"""

import re
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from guest_knows.errors import PayloadValidationError
from guest_knows.logging import get_logger
from guest_knows.models.email import EmailMessage, WebhookPayload
from guest_knows.models.knowledge import (
    SCHEMA_VERSION,
    ContentType,
    IngestMethod,
    KnowledgeItem,
    LatestGuestMessage,
    NormalizedThread,
    SourceType,
)
from guest_knows.normalizers.registry import NormalizerRegistry

__all__ = [
    "ThreadNormalizationService",
    "has_guest_question",
]

logger = get_logger(__name__)

QUESTION_WORDS = (
    "?",
    "how",
    "what",
    "when",
    "where",
    "why",
    "can",
    "could",
    "would",
    "should",
    "is",
    "are",
    "do",
    "does",
    "will",
)
# Question words alone only count on messages longer than this
QUESTION_WORD_MIN_LENGTH = 20

_ACKNOWLEDGMENTS = tuple(
    re.compile(rf"^({alternatives})[.!]*$", re.IGNORECASE)
    for alternatives in (
        "thank you|thanks|thankyou",
        "ok|okay|sounds good",
        "confirmed|confirmation",
        "perfect|great|excellent",
    )
)


def has_guest_question(text: str | None) -> bool:
    """Classify guest text as containing a question.

    Rules are applied in this order:
    1. Pure acknowledgments ("thanks", "ok", "confirmed") are not questions.
    2. Anything containing "?" is a question.
    3. Text longer than 20 characters containing a question word is a question.

    Args:
        text: Extracted guest message

    Returns:
        True if the text reads as a question
    """
    if not text:
        return False

    stripped = text.strip()
    if any(pattern.match(stripped) for pattern in _ACKNOWLEDGMENTS):
        return False

    if "?" in text:
        return True

    lowered = text.lower()
    if any(word in lowered for word in QUESTION_WORDS):
        return len(text) > QUESTION_WORD_MIN_LENGTH

    return False


class ThreadNormalizationService:
    """Service for normalizing forwarded email threads.

    Example:
        service = ThreadNormalizationService(NormalizerRegistry.default())
        item = service.normalize_webhook_payload(payload, source="gmail_webhook")
    """

    def __init__(self, registry: NormalizerRegistry) -> None:
        """Initialize service with a normalizer registry.

        Args:
            registry: Registry used to find guest content per message
        """
        self._registry = registry

    @property
    def registry(self) -> NormalizerRegistry:
        return self._registry

    def extract_latest_guest_message(self, messages: list[EmailMessage]) -> EmailMessage | None:
        """Find the most recent message that carries guest-authored text.

        A newer host-only message does not hide an older guest message.

        Args:
            messages: Thread messages in any order

        Returns:
            Extracted guest message, or None if no message qualifies
        """
        for message in sorted(messages, key=lambda m: m.timestamp, reverse=True):
            normalizer = self._registry.resolve(message)
            if normalizer is None:
                continue
            extracted = normalizer.extract_guest_message(message)
            if extracted is not None:
                logger.debug(
                    "guest_message_extracted",
                    message_id=message.id,
                    platform=normalizer.platform.value,
                )
                return extracted
        return None

    def build_full_thread_text(self, messages: list[EmailMessage]) -> str:
        """Render the whole thread chronologically for audit and prompting.

        Args:
            messages: Thread messages in any order

        Returns:
            One header block plus body per message, oldest first
        """
        blocks = []
        for index, message in enumerate(sorted(messages, key=lambda m: m.timestamp)):
            body = message.body_plain or message.body_html or ""
            blocks.append(
                f"--- Message {index + 1} ---\n"
                f"From: {message.from_address}\n"
                f"To: {message.to or ''}\n"
                f"Date: {message.date}\n"
                f"Subject: {message.subject or ''}\n\n"
                f"{body}"
            )
        return "\n\n".join(blocks)

    def normalize_webhook_payload(
        self,
        payload: dict[str, Any],
        source: str = SourceType.GMAIL_WEBHOOK,
        property_id: str | None = None,
        booking_id: str | None = None,
    ) -> KnowledgeItem:
        """Build an unsaved KnowledgeItem from a validated webhook payload.

        Correlation keys resolve as: explicit argument, then payload value,
        then (property only) the value extracted from message content.

        Args:
            payload: Validated webhook payload, kept verbatim as raw_payload
            source: Source used when the payload does not name one
            property_id: Explicit property ID override
            booking_id: Explicit booking ID override

        Returns:
            KnowledgeItem with id=None

        Raises:
            PayloadValidationError: If a field has a type the models cannot accept
        """
        try:
            parsed = WebhookPayload.model_validate(payload)
        except ValidationError as e:
            raise PayloadValidationError(_describe_first_error(e)) from e
        messages = parsed.messages
        chronological = sorted(messages, key=lambda m: m.timestamp)
        earliest, latest = chronological[0], chronological[-1]

        guest = self.extract_latest_guest_message(messages)
        latest_guest = None
        if guest is not None:
            latest_guest = LatestGuestMessage(
                id=guest.id,
                date=guest.date,
                from_address=guest.from_address,
                subject=guest.subject,
                body_plain=guest.body_plain,
            )

        sender = latest.from_address or earliest.from_address
        platform = self._registry.detect_platform(sender)

        platform_thread_id = None
        extracted_property_id = None
        if platform is not None and latest.body_plain:
            normalizer = self._registry.get_by_platform(platform)
            if normalizer is not None:
                platform_thread_id = normalizer.extract_thread_id(latest.body_plain, latest.subject)
                extracted_property_id = normalizer.extract_property_id(
                    latest.body_plain, latest.subject
                )

        normalized = NormalizedThread(
            latest_guest_message=latest_guest,
            full_thread_text=self.build_full_thread_text(messages),
            message_count=len(messages),
            subject=latest.subject or earliest.subject or "No Subject",
            from_address=sender,
            to=latest.to or earliest.to,
            timestamps=[m.date or m.id for m in messages],
            has_guest_question=has_guest_question(
                latest_guest.body_plain if latest_guest else None
            ),
        )

        item = KnowledgeItem(
            id=None,
            schema_version=parsed.schema_version or SCHEMA_VERSION,
            source=parsed.source or source,
            ingest_method=IngestMethod.WEBHOOK,
            content_type=ContentType.EMAIL_MESSAGE,
            created_at=datetime.now(UTC),
            property_id=property_id or parsed.property_id or extracted_property_id,
            booking_id=booking_id or parsed.booking_id,
            external_thread_id=parsed.thread_id,
            platform=platform,
            platform_thread_id=platform_thread_id,
            raw_payload=payload,
            normalized=normalized,
        )
        logger.debug(
            "thread_normalized",
            message_count=normalized.message_count,
            platform=platform.value if platform else None,
            has_guest_message=latest_guest is not None,
            has_guest_question=normalized.has_guest_question,
        )
        return item


def _describe_first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"Invalid field {location}: {first['msg']}"
