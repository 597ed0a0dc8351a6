"""Ingestion orchestrator for guest_knows.

This module provides the main entry point for the guest_knows package:
it runs webhook payloads through validate, normalize, store, suggest and
notify, and serves the redacted read paths over the knowledge store.
"""

from typing import Any, Self

from guest_knows.config import GuestKnowsConfig
from guest_knows.errors import StorageUnavailableError
from guest_knows.infra.llm import create_llm_provider
from guest_knows.infra.redis.client import RedisKeyValueStore
from guest_knows.interfaces.llm import LLMInterface
from guest_knows.interfaces.notifier import NotifierInterface
from guest_knows.interfaces.reply import ReplyGeneratorInterface
from guest_knows.interfaces.storage import KeyValueStoreInterface
from guest_knows.logging import get_logger
from guest_knows.models.ingest import IngestResult, IngestStage, PropertyContext, StageStatus
from guest_knows.models.knowledge import KnowledgeItem, SourceType
from guest_knows.normalizers.registry import NormalizerRegistry
from guest_knows.services.knowledge_store import KnowledgeStore
from guest_knows.services.normalization import ThreadNormalizationService
from guest_knows.services.notification import LoggingHostNotifier
from guest_knows.services.reply import ReplySuggestionService
from guest_knows.services.validation import (
    redact_knowledge_item,
    sanitize_for_logging,
    validate_webhook_payload,
)

__all__ = ["IngestionOrchestrator"]

logger = get_logger(__name__)


class IngestionOrchestrator:
    """Runs the ingestion pipeline and the knowledge read paths.

    Validation and normalization errors propagate to the caller. Storage,
    reply drafting and notification are best-effort: each stage records
    its own outcome on the IngestResult and a failure never stops the
    stages after it.

    Example:
        async with await IngestionOrchestrator.from_config(GuestKnowsConfig()) as orch:
            result = await orch.ingest(payload)
            body = result.to_response()
    """

    def __init__(
        self,
        store: KnowledgeStore | None,
        normalizer: ThreadNormalizationService,
        reply_generator: ReplyGeneratorInterface | None = None,
        notifier: NotifierInterface | None = None,
        *,
        host_email: str = "host@capehost.ai",
        default_source: str = SourceType.GMAIL_WEBHOOK,
        backend: KeyValueStoreInterface | None = None,
        llm: LLMInterface | None = None,
    ) -> None:
        """Initialize orchestrator with its collaborators.

        Args:
            store: Knowledge store; None makes the store stage fail
            normalizer: Thread normalization service
            reply_generator: Reply drafting service; None skips drafting
            notifier: Host notifier; None skips notification
            host_email: Recipient of suggested replies
            default_source: Source recorded when a payload names none
            backend: Key-value backend to close on shutdown
            llm: LLM provider to close on shutdown
        """
        self._store = store
        self._normalizer = normalizer
        self._reply_generator = reply_generator
        self._notifier = notifier
        self._host_email = host_email
        self._default_source = default_source
        self._backend = backend
        self._llm = llm

    @classmethod
    async def from_config(
        cls,
        config: GuestKnowsConfig,
        backend: KeyValueStoreInterface | None = None,
    ) -> Self:
        """Wire the standard implementations from configuration.

        If Redis cannot be reached the orchestrator still starts and
        ingestion runs in degraded mode; the Redis store retries the
        connection on each call until it succeeds.

        Args:
            config: Application configuration
            backend: Key-value backend to use instead of Redis

        Returns:
            Ready orchestrator
        """
        if backend is None:
            backend = await RedisKeyValueStore.from_config(config.redis)
        store = KnowledgeStore(backend, config.index)
        llm = create_llm_provider(config.llm)
        registry = NormalizerRegistry.default(host_domains=config.ingest.host_domains)

        logger.info(
            "orchestrator_configured",
            backend=type(backend).__name__,
            llm=type(llm).__name__ if llm else None,
            platforms=[p.value for p in registry.platforms],
            atomic_index_appends=config.index.atomic_appends,
        )
        return cls(
            store=store,
            normalizer=ThreadNormalizationService(registry),
            reply_generator=ReplySuggestionService(llm=llm, store=store),
            notifier=LoggingHostNotifier(),
            host_email=config.notifier.host_email,
            default_source=config.ingest.default_source,
            backend=backend,
            llm=llm,
        )

    async def close(self) -> None:
        """Close owned backend and provider connections."""
        if self._backend is not None:
            await self._backend.close()
        if self._llm is not None:
            await self._llm.close()
        logger.info("orchestrator_closed")

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def store(self) -> KnowledgeStore | None:
        return self._store

    # Ingestion

    async def ingest(self, payload: Any) -> IngestResult:
        """Ingest one webhook payload.

        Args:
            payload: Decoded JSON request body

        Returns:
            Per-stage outcome, the normalized item and any draft

        Raises:
            PayloadValidationError: If the payload shape is invalid
        """
        validate_webhook_payload(payload)
        logger.info(
            "webhook_received",
            source=payload.get("source") or self._default_source,
            thread_id=payload.get("threadId"),
            message_count=len(payload["messages"]),
            payload=sanitize_for_logging(payload),
        )

        item = self._normalizer.normalize_webhook_payload(payload, source=self._default_source)
        result = IngestResult(item=item)

        await self._store_stage(result)
        await self._suggest_stage(result)
        await self._notify_stage(result)

        logger.info(
            "webhook_processed",
            knowledge_item_id=result.knowledge_item_id,
            has_suggested_reply=result.has_suggested_reply,
            stages={s.stage.value: s.status.value for s in result.stages},
        )
        return result

    async def _store_stage(self, result: IngestResult) -> None:
        if self._store is None:
            result.record(IngestStage.STORE, StageStatus.FAILED, "storage not configured")
            logger.error("knowledge_item_store_failed", error="storage not configured")
            return
        try:
            item_id = await self._store.store(result.item)
        except Exception as e:
            result.record(IngestStage.STORE, StageStatus.FAILED, str(e))
            logger.error("knowledge_item_store_failed", error=str(e), exc_info=True)
            return

        result.item = result.item.model_copy(update={"id": item_id})
        result.record(IngestStage.STORE, StageStatus.SUCCEEDED)
        logger.info(
            "knowledge_item_stored",
            item_id=item_id,
            source=result.item.source,
            property_id=result.item.property_id,
            booking_id=result.item.booking_id,
        )

    async def _suggest_stage(self, result: IngestResult) -> None:
        item = result.item
        if item.normalized.latest_guest_message is None:
            result.record(IngestStage.SUGGEST, StageStatus.SKIPPED, "no guest message")
            return
        if self._reply_generator is None:
            result.record(
                IngestStage.SUGGEST, StageStatus.SKIPPED, "reply generator not configured"
            )
            return

        property_context = (
            PropertyContext(property_id=item.property_id) if item.property_id else None
        )
        try:
            reply = await self._reply_generator.suggest_reply(item.normalized, property_context)
        except Exception as e:
            result.record(IngestStage.SUGGEST, StageStatus.FAILED, str(e))
            logger.error("suggested_reply_failed", error=str(e), exc_info=True)
            return

        result.suggested_reply = reply
        result.record(IngestStage.SUGGEST, StageStatus.SUCCEEDED)
        logger.info(
            "suggested_reply_generated",
            knowledge_item_id=result.knowledge_item_id,
            confidence=reply.confidence,
        )

    async def _notify_stage(self, result: IngestResult) -> None:
        reply = result.suggested_reply
        if reply is None:
            result.record(IngestStage.NOTIFY, StageStatus.SKIPPED, "no suggested reply")
            return
        if self._notifier is None:
            result.record(IngestStage.NOTIFY, StageStatus.SKIPPED, "notifier not configured")
            return

        item = result.item
        guest = item.normalized.latest_guest_message
        metadata = {
            "property_id": item.property_id,
            "booking_id": item.booking_id,
            "guest_name": guest.from_address if guest else None,
            "timestamps": item.normalized.timestamps,
            "thread_id": item.external_thread_id,
            "knowledge_item_id": result.knowledge_item_id,
        }
        try:
            delivery = await self._notifier.send(
                self._host_email, item.normalized.subject, reply.draft, metadata
            )
        except Exception as e:
            result.record(IngestStage.NOTIFY, StageStatus.FAILED, str(e))
            logger.error("host_notification_failed", error=str(e), exc_info=True)
            return

        result.delivery = delivery
        if delivery.success:
            result.record(IngestStage.NOTIFY, StageStatus.SUCCEEDED)
            logger.info("host_notification_sent", message_id=delivery.message_id)
        else:
            result.record(IngestStage.NOTIFY, StageStatus.FAILED, delivery.error)
            logger.error("host_notification_failed", error=delivery.error)

    # Retrieval

    def _require_store(self) -> KnowledgeStore:
        if self._store is None:
            raise StorageUnavailableError("Knowledge store is not configured")
        return self._store

    async def get_thread(self, thread_id: str) -> dict[str, Any]:
        """Get redacted items for a mailbox thread, oldest first."""
        items = await self._require_store().get_thread_items(thread_id)
        logger.info("thread_retrieved", external_thread_id=thread_id, item_count=len(items))
        return {
            "external_thread_id": thread_id,
            "items": _redact_all(items),
            "count": len(items),
        }

    async def get_booking(self, booking_id: str) -> dict[str, Any]:
        """Get thread ids and redacted items for a booking."""
        booking = await self._require_store().get_booking_items(booking_id)
        logger.info(
            "booking_retrieved",
            booking_id=booking_id,
            thread_count=len(booking.thread_ids),
            item_count=len(booking.items),
        )
        return {
            "booking_id": booking_id,
            "threads": booking.thread_ids,
            "items": _redact_all(booking.items),
            "item_count": len(booking.items),
            "thread_count": len(booking.thread_ids),
        }

    async def get_property_knowledge(
        self,
        property_id: str,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """Get redacted items for a property, newest first.

        Args:
            property_id: Property id
            limit: Window over the newest entries of the property index

        Returns:
            Response body with property_id, items and count
        """
        items = await self._require_store().get_property_items(property_id, limit)
        logger.info(
            "property_knowledge_retrieved",
            property_id=property_id,
            item_count=len(items),
            limit=limit,
        )
        return {
            "property_id": property_id,
            "items": _redact_all(items),
            "count": len(items),
        }

    async def store_property_context(self, property_id: str, context: str) -> dict[str, Any]:
        """Save free-text property context for later reply drafting."""
        await self._require_store().store_property_context(property_id, context)
        logger.info("property_context_stored", property_id=property_id, length=len(context))
        return {"status": "stored", "property_id": property_id}


def _redact_all(items: list[KnowledgeItem]) -> list[dict[str, Any]]:
    return [redact_knowledge_item(item) for item in items]
