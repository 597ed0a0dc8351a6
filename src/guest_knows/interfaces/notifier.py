"""Host notifier interface for guest_knows."""

from typing import Any, Protocol, runtime_checkable

from guest_knows.models.ingest import DeliveryResult

__all__ = [
    "NotifierInterface",
]


@runtime_checkable
class NotifierInterface(Protocol):
    """Contract for delivering a suggested reply to the host."""

    async def send(
        self,
        recipient: str,
        subject: str,
        draft: str,
        metadata: dict[str, Any],
    ) -> DeliveryResult:
        """Deliver a draft.

        Args:
            recipient: Host email address
            subject: Thread subject
            draft: Suggested reply text
            metadata: Correlation keys and timestamps for the host

        Returns:
            Delivery outcome; failures are reported, not raised
        """
        ...
