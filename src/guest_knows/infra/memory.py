"""In-memory key-value backend for guest_knows.

Used by the test suite and for running the API locally without Redis.
State lives in the process, so it is not shared between workers.
"""

import time
from typing import Any, Self

from guest_knows.interfaces.storage import KeyValueStoreInterface

__all__ = [
    "InMemoryKeyValueStore",
]


class InMemoryKeyValueStore(KeyValueStoreInterface):
    """Dict-backed KeyValueStoreInterface with per-key expiry."""

    config_class = None

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._expires_at: dict[str, float] = {}

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        return cls()

    def _live(self, key: str) -> str | None:
        deadline = self._expires_at.get(key)
        if deadline is not None and deadline <= time.monotonic():
            self._values.pop(key, None)
            self._expires_at.pop(key, None)
        return self._values.get(key)

    def _write(self, key: str, value: str, ttl_seconds: int | None) -> None:
        self._values[key] = value
        if ttl_seconds:
            self._expires_at[key] = time.monotonic() + ttl_seconds
        else:
            self._expires_at.pop(key, None)

    async def get(self, key: str) -> str | None:
        return self._live(key)

    async def get_many(self, keys: list[str]) -> list[str | None]:
        return [self._live(key) for key in keys]

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        self._write(key, value, ttl_seconds)

    async def compare_and_set(
        self,
        key: str,
        expected: str | None,
        value: str,
        ttl_seconds: int | None = None,
    ) -> bool:
        if self._live(key) != expected:
            return False
        self._write(key, value, ttl_seconds)
        return True

    async def close(self) -> None:
        self._values.clear()
        self._expires_at.clear()

    def ttl(self, key: str) -> float | None:
        """Seconds until a key expires, or None if it never does."""
        deadline = self._expires_at.get(key)
        if deadline is None:
            return None
        return max(0.0, deadline - time.monotonic())

    def keys(self) -> list[str]:
        """Live keys, for inspection in tests."""
        return [key for key in list(self._values) if self._live(key) is not None]
