"""guest_knows - guest email ingestion and knowledge store for short-term rental hosts.

This package provides tools for:
- Recognizing booking-platform emails (Airbnb, VRBO) and direct guest mail
- Extracting guest-authored text from platform notification boilerplate
- Persisting normalized threads with thread, booking and property indexes
- Drafting host replies with an LLM or a template fallback

Example usage:
    from guest_knows import GuestKnowsConfig, IngestionOrchestrator

    async with await IngestionOrchestrator.from_config(GuestKnowsConfig()) as orch:
        result = await orch.ingest(payload)
        print(result.to_response())
"""

__version__ = "0.1.0"

from guest_knows.config import GuestKnowsConfig
from guest_knows.errors import (
    GuestKnowsError,
    IndexConflictError,
    PayloadValidationError,
    ReplyGenerationError,
    StorageUnavailableError,
)
from guest_knows.infra.llm import AnthropicProvider, OpenAIProvider
from guest_knows.infra.memory import InMemoryKeyValueStore
from guest_knows.infra.redis.client import RedisKeyValueStore
from guest_knows.interfaces.llm import LLMInterface
from guest_knows.interfaces.notifier import NotifierInterface
from guest_knows.interfaces.reply import ReplyGeneratorInterface
from guest_knows.interfaces.storage import KeyValueStoreInterface
from guest_knows.models.knowledge import KnowledgeItem
from guest_knows.normalizers.registry import NormalizerRegistry
from guest_knows.orchestrator import IngestionOrchestrator
from guest_knows.services.knowledge_store import KnowledgeStore
from guest_knows.services.normalization import ThreadNormalizationService

__all__ = [  # noqa: RUF022
    # Orchestrator
    "IngestionOrchestrator",
    "GuestKnowsConfig",
    # Core services
    "KnowledgeStore",
    "NormalizerRegistry",
    "ThreadNormalizationService",
    "KnowledgeItem",
    # Implementations
    "RedisKeyValueStore",
    "InMemoryKeyValueStore",
    "OpenAIProvider",
    "AnthropicProvider",
    # Interfaces
    "KeyValueStoreInterface",
    "LLMInterface",
    "NotifierInterface",
    "ReplyGeneratorInterface",
    # Errors
    "GuestKnowsError",
    "IndexConflictError",
    "PayloadValidationError",
    "ReplyGenerationError",
    "StorageUnavailableError",
]
