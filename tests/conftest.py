"""Shared test fixtures for guest_knows.

This module provides pytest fixtures used across all tests.
"""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from guest_knows.config import IndexSettings
from guest_knows.infra.memory import InMemoryKeyValueStore
from guest_knows.models.email import EmailMessage
from guest_knows.models.ingest import DeliveryResult, SuggestedReply
from guest_knows.normalizers.registry import NormalizerRegistry
from guest_knows.services.knowledge_store import KnowledgeStore
from guest_knows.services.normalization import ThreadNormalizationService
from mocks.payloads import AIRBNB_BODY, VRBO_BODY, VRBO_SUBJECT, make_message, make_payload


# Message fixtures
@pytest.fixture
def vrbo_message() -> dict[str, Any]:
    return make_message(
        id="vrbo-1",
        **{"from": "Vrbo <sender@messages.homeaway.com>"},
        subject=VRBO_SUBJECT,
        bodyPlain=VRBO_BODY,
    )


@pytest.fixture
def airbnb_message() -> dict[str, Any]:
    return make_message(
        id="airbnb-1",
        **{"from": "Airbnb <automated@airbnb.com>"},
        subject="RE: Reservation at Seaside Cottage for Mar 10 - 14",
        bodyPlain=AIRBNB_BODY,
    )


@pytest.fixture
def guest_message() -> dict[str, Any]:
    return make_message()


@pytest.fixture
def host_message() -> dict[str, Any]:
    return make_message(
        id="msg-2",
        **{"from": "Cape Host <host@capehost.ai>"},
        to="jane@example.com",
        date="2024-03-01T11:00:00Z",
        subject="Re: Question about my stay",
        bodyPlain="Yes, parking is free for guests.",
    )


@pytest.fixture
def email(guest_message: dict[str, Any]) -> EmailMessage:
    return EmailMessage.model_validate(guest_message)


@pytest.fixture
def sample_payload(guest_message: dict[str, Any], host_message: dict[str, Any]) -> dict[str, Any]:
    return make_payload(guest_message, host_message, property_id="prop-1", booking_id="book-1")


# Service fixtures
@pytest.fixture
def registry() -> NormalizerRegistry:
    return NormalizerRegistry.default(host_domains=["capehost.ai", "capehost.com"])


@pytest.fixture
def normalization_service(registry: NormalizerRegistry) -> ThreadNormalizationService:
    return ThreadNormalizationService(registry)


@pytest.fixture
def memory_backend() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def knowledge_store(memory_backend: InMemoryKeyValueStore) -> KnowledgeStore:
    return KnowledgeStore(memory_backend, IndexSettings(atomic_appends=True))


# Mock fixtures
@pytest.fixture
def mock_llm() -> AsyncMock:
    """Create mock LLM interface."""
    llm = AsyncMock()
    llm.generate_reply.return_value = SuggestedReply(
        draft="Parking is free, see you soon!", confidence=0.85
    )
    return llm


@pytest.fixture
def mock_reply_generator() -> AsyncMock:
    """Create mock reply generator."""
    generator = AsyncMock()
    generator.suggest_reply.return_value = SuggestedReply(draft="Hello!", confidence=0.6)
    return generator


@pytest.fixture
def mock_notifier() -> AsyncMock:
    """Create mock notifier."""
    notifier = AsyncMock()
    notifier.send.return_value = DeliveryResult(success=True, message_id="stub-1")
    return notifier
