"""Service layer for guest_knows.

This module exports the main service entry points.
"""

from guest_knows.services.knowledge_store import KnowledgeStore
from guest_knows.services.normalization import ThreadNormalizationService, has_guest_question
from guest_knows.services.notification import LoggingHostNotifier
from guest_knows.services.reply import ReplySuggestionService
from guest_knows.services.validation import (
    redact_knowledge_item,
    sanitize_for_logging,
    validate_webhook_payload,
)

__all__ = [
    "KnowledgeStore",
    "LoggingHostNotifier",
    "ReplySuggestionService",
    "ThreadNormalizationService",
    "has_guest_question",
    "redact_knowledge_item",
    "sanitize_for_logging",
    "validate_webhook_payload",
]
