"""LLM interface for guest_knows.

This module defines the Protocol for drafting host replies with an LLM.
"""

from typing import Protocol, runtime_checkable

from guest_knows.models.ingest import SuggestedReply

__all__ = [
    "LLMInterface",
]


@runtime_checkable
class LLMInterface(Protocol):
    """Contract for LLM reply drafting."""

    async def generate_reply(self, prompt: str) -> SuggestedReply:
        """Draft a reply from a fully built prompt.

        Args:
            prompt: Instructions, property context and thread history

        Returns:
            Drafted reply with the provider's confidence

        Raises:
            ReplyGenerationError: If the provider returned no text
        """
        ...

    async def close(self) -> None:
        """Release provider resources."""
        ...
