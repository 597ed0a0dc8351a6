"""Reply generator interface for guest_knows."""

from typing import Protocol, runtime_checkable

from guest_knows.models.ingest import PropertyContext, SuggestedReply
from guest_knows.models.knowledge import NormalizedThread

__all__ = [
    "ReplyGeneratorInterface",
]


@runtime_checkable
class ReplyGeneratorInterface(Protocol):
    """Contract for drafting a host reply to a normalized thread."""

    async def suggest_reply(
        self,
        thread: NormalizedThread,
        property_context: PropertyContext | None = None,
    ) -> SuggestedReply:
        """Draft a reply.

        Args:
            thread: Normalized thread with the latest guest message
            property_context: Property details, if the thread has a property

        Returns:
            Draft and confidence score
        """
        ...
