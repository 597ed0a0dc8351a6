"""Indexed knowledge store for guest_knows.

This module persists knowledge items in a flat key-value store and keeps
secondary indexes by thread, booking and property as JSON id lists
under their own keys.

Key layout:
    knowledge-item:{id}            item document (no expiry)
    thread:{thread_id}             item ids
    booking:{booking_id}           external thread ids
    booking:{booking_id}:items     item ids
    property:{property_id}         item ids
    property:{property_id}:context free-text property context
"""

import json

from guest_knows.config import IndexSettings
from guest_knows.errors import IndexConflictError, StorageUnavailableError
from guest_knows.interfaces.storage import KeyValueStoreInterface
from guest_knows.logging import get_logger
from guest_knows.models.ingest import BookingItems
from guest_knows.models.knowledge import KnowledgeItem
from guest_knows.utils.ids import generate_item_id

__all__ = [
    "KnowledgeStore",
    "booking_items_key",
    "booking_threads_key",
    "item_key",
    "property_context_key",
    "property_items_key",
    "thread_key",
]

logger = get_logger(__name__)


def item_key(item_id: str) -> str:
    return f"knowledge-item:{item_id}"


def thread_key(thread_id: str) -> str:
    return f"thread:{thread_id}"


def booking_threads_key(booking_id: str) -> str:
    return f"booking:{booking_id}"


def booking_items_key(booking_id: str) -> str:
    return f"booking:{booking_id}:items"


def property_items_key(property_id: str) -> str:
    return f"property:{property_id}"


def property_context_key(property_id: str) -> str:
    return f"property:{property_id}:context"


def _decode_ids(raw: str | None) -> list[str]:
    if raw is None:
        return []
    value = json.loads(raw)
    return [str(v) for v in value] if isinstance(value, list) else []


class KnowledgeStore:
    """Knowledge item persistence with denormalized secondary indexes.

    The backend offers no multi-key transactions, so an item write and
    its index appends are separate operations. An index may therefore
    reference an item that no longer exists; readers skip such entries.

    Index appends come in two modes (IndexSettings.atomic_appends):
    - atomic: compare-and-set with retry, so concurrent appends to the
      same list never lose an entry.
    - plain: read the list, append, write it back. Two concurrent
      appends to the same list can lose one of the two entries.

    Example:
        store = KnowledgeStore(InMemoryKeyValueStore(), IndexSettings())
        item_id = await store.store(item)
        items = await store.get_thread_items("thread-1")
    """

    def __init__(
        self,
        backend: KeyValueStoreInterface | None,
        settings: IndexSettings | None = None,
    ) -> None:
        """Initialize store.

        Args:
            backend: Key-value backend; None leaves every operation failing
                with StorageUnavailableError
            settings: Index expiry and append settings
        """
        self._backend = backend
        self._settings = settings or IndexSettings()

    @property
    def backend(self) -> KeyValueStoreInterface:
        if self._backend is None:
            raise StorageUnavailableError("Knowledge store backend is not configured")
        return self._backend

    @property
    def ttl_seconds(self) -> int:
        return self._settings.ttl_seconds

    # Writes

    async def store(self, item: KnowledgeItem) -> str:
        """Persist an item and add it to every index it belongs to.

        Storing an item that already has an id overwrites its document;
        index lists never receive the same id twice.

        Args:
            item: Item to persist; an id is generated if it has none

        Returns:
            The item id
        """
        backend = self.backend
        if item.id is None:
            item = item.model_copy(update={"id": generate_item_id()})
        item_id = item.id

        await backend.put(item_key(item_id), item.model_dump_json(by_alias=True))

        if item.external_thread_id:
            await self._append(thread_key(item.external_thread_id), item_id)

        if item.booking_id:
            if item.external_thread_id:
                await self._append(booking_threads_key(item.booking_id), item.external_thread_id)
            await self._append(booking_items_key(item.booking_id), item_id)

        if item.property_id:
            await self._append(property_items_key(item.property_id), item_id)

        logger.debug(
            "knowledge_item_written",
            item_id=item_id,
            thread_id=item.external_thread_id,
            booking_id=item.booking_id,
            property_id=item.property_id,
        )
        return item_id

    async def store_property_context(self, property_id: str, context: str) -> None:
        """Save the free-text context used when drafting replies for a property."""
        await self.backend.put(
            property_context_key(property_id), context, ttl_seconds=self.ttl_seconds
        )

    async def _append(self, key: str, member: str) -> bool:
        """Append a member to an index list unless it is already present.

        Returns:
            True if the member was added, False if it was already there
        """
        if self._settings.atomic_appends:
            return await self._append_atomic(key, member)
        return await self._append_plain(key, member)

    async def _append_plain(self, key: str, member: str) -> bool:
        backend = self.backend
        members = _decode_ids(await backend.get(key))
        if member in members:
            return False
        members.append(member)
        await backend.put(key, json.dumps(members), ttl_seconds=self.ttl_seconds)
        return True

    async def _append_atomic(self, key: str, member: str) -> bool:
        backend = self.backend
        attempts = max(1, self._settings.max_append_retries)
        for attempt in range(1, attempts + 1):
            raw = await backend.get(key)
            members = _decode_ids(raw)
            if member in members:
                return False
            members.append(member)
            if await backend.compare_and_set(
                key, raw, json.dumps(members), ttl_seconds=self.ttl_seconds
            ):
                if attempt > 1:
                    logger.debug("index_append_retried", key=key, attempts=attempt)
                return True
        raise IndexConflictError(key, attempts)

    # Reads

    async def get_item(self, item_id: str) -> KnowledgeItem | None:
        """Get an item by id.

        Args:
            item_id: Item id

        Returns:
            KnowledgeItem if found, None otherwise
        """
        raw = await self.backend.get(item_key(item_id))
        if raw is None:
            return None
        return KnowledgeItem.model_validate_json(raw)

    async def get_thread_items(self, thread_id: str) -> list[KnowledgeItem]:
        """Get every item recorded for a mailbox thread, oldest first.

        Args:
            thread_id: External (mailbox) thread id

        Returns:
            Items sorted ascending by created_at
        """
        ids = _decode_ids(await self.backend.get(thread_key(thread_id)))
        items = await self._fetch(ids)
        return sorted(items, key=lambda i: i.created_at)

    async def get_property_items(
        self,
        property_id: str,
        limit: int | None = None,
    ) -> list[KnowledgeItem]:
        """Get items recorded for a property, newest first.

        The limit is applied to the index list before fetching: it keeps
        the last `limit` ids in insertion order. If items were stored out
        of created_at order, this window is not the `limit` most recent
        items by timestamp.

        Args:
            property_id: Property id
            limit: Maximum number of ids to fetch from the end of the index

        Returns:
            Items sorted descending by created_at

        Raises:
            ValueError: If limit is less than 1
        """
        if limit is not None and limit < 1:
            raise ValueError("limit must be a positive integer")
        ids = _decode_ids(await self.backend.get(property_items_key(property_id)))
        if limit is not None:
            ids = ids[-limit:]
        items = await self._fetch(ids)
        return sorted(items, key=lambda i: i.created_at, reverse=True)

    async def get_booking_items(self, booking_id: str) -> BookingItems:
        """Get the threads and items recorded for a booking.

        Args:
            booking_id: Booking id

        Returns:
            Thread ids in insertion order and items sorted ascending
            by created_at
        """
        backend = self.backend
        raw_threads, raw_items = await backend.get_many(
            [booking_threads_key(booking_id), booking_items_key(booking_id)]
        )
        items = await self._fetch(_decode_ids(raw_items))
        return BookingItems(
            thread_ids=_decode_ids(raw_threads),
            items=sorted(items, key=lambda i: i.created_at),
        )

    async def get_property_context(self, property_id: str) -> str | None:
        """Get the free-text context for a property, if one was stored."""
        return await self.backend.get(property_context_key(property_id))

    async def _fetch(self, ids: list[str]) -> list[KnowledgeItem]:
        """Batch-fetch items, skipping ids whose document is gone."""
        if not ids:
            return []
        raws = await self.backend.get_many([item_key(i) for i in ids])
        items = []
        for item_id, raw in zip(ids, raws, strict=True):
            if raw is None:
                logger.debug("dangling_index_entry", item_id=item_id)
                continue
            items.append(KnowledgeItem.model_validate_json(raw))
        return items
