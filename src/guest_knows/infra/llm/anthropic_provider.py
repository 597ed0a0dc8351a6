"""Anthropic LLM provider for guest_knows.

This module provides the Anthropic implementation of the reply-drafting
LLM interface.
"""

from typing import Any, Self

from anthropic import AsyncAnthropic

from guest_knows.config import LLMSettings
from guest_knows.errors import ReplyGenerationError
from guest_knows.infra.llm.prompts import LLM_REPLY_CONFIDENCE, REPLY_SYSTEM_PROMPT
from guest_knows.interfaces.llm import LLMInterface
from guest_knows.logging import get_logger
from guest_knows.models.ingest import SuggestedReply

__all__ = [
    "AnthropicProvider",
]

logger = get_logger(__name__)


class AnthropicProvider(LLMInterface):
    """Anthropic implementation of LLMInterface."""

    config_class = LLMSettings

    def __init__(self, settings: LLMSettings, client: AsyncAnthropic | None = None) -> None:
        """Initialize Anthropic provider.

        Args:
            settings: LLM configuration settings
            client: Pre-built client, mainly for tests
        """
        self._settings = settings
        if client is None:
            api_key = (
                settings.anthropic_api_key.get_secret_value()
                if settings.anthropic_api_key
                else None
            )
            client = AsyncAnthropic(api_key=api_key)
        self._client = client
        self._model = settings.anthropic_model

    @classmethod
    async def from_config(cls, config: LLMSettings) -> Self:
        """Factory method for orchestrator instantiation.

        Args:
            config: LLM settings

        Returns:
            AnthropicProvider instance
        """
        return cls(config)

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict.

        Args:
            config: Dictionary with LLM settings

        Returns:
            AnthropicProvider instance
        """
        settings = LLMSettings(**config)
        return cls(settings)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()

    async def generate_reply(self, prompt: str) -> SuggestedReply:
        """Draft a reply with the messages API."""
        response = await self._client.messages.create(
            model=self._model,
            max_tokens=self._settings.max_tokens,
            temperature=self._settings.temperature,
            system=REPLY_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": prompt}],
        )
        draft = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        ).strip()
        if not draft:
            raise ReplyGenerationError("Empty response from Anthropic")

        logger.debug("anthropic_reply_generated", model=self._model, length=len(draft))
        return SuggestedReply(draft=draft, confidence=LLM_REPLY_CONFIDENCE)
