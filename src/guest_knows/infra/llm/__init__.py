"""LLM provider implementations for guest_knows."""

from guest_knows.config import LLMSettings
from guest_knows.infra.llm.anthropic_provider import AnthropicProvider
from guest_knows.infra.llm.openai_provider import OpenAIProvider
from guest_knows.interfaces.llm import LLMInterface

__all__ = ["AnthropicProvider", "OpenAIProvider", "create_llm_provider"]


def create_llm_provider(settings: LLMSettings) -> LLMInterface | None:
    """Pick a provider from the configured keys: OpenAI first, then Anthropic.

    Args:
        settings: LLM settings

    Returns:
        Provider instance, or None if no key is configured
    """
    if settings.openai_api_key is not None:
        return OpenAIProvider(settings)
    if settings.anthropic_api_key is not None:
        return AnthropicProvider(settings)
    return None
