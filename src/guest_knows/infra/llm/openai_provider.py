"""OpenAI LLM provider for guest_knows.

This module provides the OpenAI implementation of the reply-drafting
LLM interface.
"""

from typing import Any, Self

from openai import AsyncOpenAI

from guest_knows.config import LLMSettings
from guest_knows.errors import ReplyGenerationError
from guest_knows.infra.llm.prompts import LLM_REPLY_CONFIDENCE, REPLY_SYSTEM_PROMPT
from guest_knows.interfaces.llm import LLMInterface
from guest_knows.logging import get_logger
from guest_knows.models.ingest import SuggestedReply

__all__ = [
    "OpenAIProvider",
]

logger = get_logger(__name__)


class OpenAIProvider(LLMInterface):
    """OpenAI implementation of LLMInterface.

    API errors propagate to the caller, which decides whether to
    fall back to a template reply.
    """

    config_class = LLMSettings

    def __init__(self, settings: LLMSettings, client: AsyncOpenAI | None = None) -> None:
        """Initialize OpenAI provider.

        Args:
            settings: LLM configuration settings
            client: Pre-built client, mainly for tests
        """
        self._settings = settings
        if client is None:
            api_key = (
                settings.openai_api_key.get_secret_value() if settings.openai_api_key else None
            )
            client = AsyncOpenAI(api_key=api_key)
        self._client = client
        self._model = settings.openai_model

    @classmethod
    async def from_config(cls, config: LLMSettings) -> Self:
        """Factory method for orchestrator instantiation.

        Args:
            config: LLM settings

        Returns:
            OpenAIProvider instance
        """
        return cls(config)

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict.

        Args:
            config: Dictionary with LLM settings

        Returns:
            OpenAIProvider instance
        """
        settings = LLMSettings(**config)
        return cls(settings)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.close()

    async def generate_reply(self, prompt: str) -> SuggestedReply:
        """Draft a reply with the chat completions API."""
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": REPLY_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self._settings.temperature,
            max_tokens=self._settings.max_tokens,
        )
        draft = ""
        if response.choices:
            draft = (response.choices[0].message.content or "").strip()
        if not draft:
            raise ReplyGenerationError("Empty response from OpenAI")

        logger.debug("openai_reply_generated", model=self._model, length=len(draft))
        return SuggestedReply(draft=draft, confidence=LLM_REPLY_CONFIDENCE)
