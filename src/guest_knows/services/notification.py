"""Host notification service for guest_knows.

Outbound email is not wired up yet: the notifier logs what it would
send and reports success with a synthetic message id.
"""

import time
from typing import Any

from guest_knows.interfaces.notifier import NotifierInterface
from guest_knows.logging import get_logger
from guest_knows.models.ingest import DeliveryResult

__all__ = [
    "LoggingHostNotifier",
]

logger = get_logger(__name__)

SUBJECT_PREFIX = "[Suggested Reply]"


class LoggingHostNotifier(NotifierInterface):
    """Notifier that logs the suggested reply instead of emailing it."""

    async def send(
        self,
        recipient: str,
        subject: str,
        draft: str,
        metadata: dict[str, Any],
    ) -> DeliveryResult:
        if not recipient:
            return DeliveryResult(success=False, error="Recipient email required")

        message_id = f"stub-{time.time_ns() // 1_000_000}"
        logger.warning(
            "email_delivery_stub",
            message_id=message_id,
            subject=f"{SUBJECT_PREFIX} {subject}",
            draft_length=len(draft),
            property_id=metadata.get("property_id"),
            booking_id=metadata.get("booking_id"),
            thread_id=metadata.get("thread_id"),
            knowledge_item_id=metadata.get("knowledge_item_id"),
        )
        return DeliveryResult(success=True, message_id=message_id)
