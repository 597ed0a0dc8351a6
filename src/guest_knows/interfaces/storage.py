"""Key-value storage interface for guest_knows.

This module defines the Protocol the knowledge store is built on: a flat
string key-value store with per-key expiry and no multi-key transactions.
"""

from typing import ClassVar, Protocol, runtime_checkable

__all__ = [
    "KeyValueStoreInterface",
]


@runtime_checkable
class KeyValueStoreInterface(Protocol):
    """Contract for the key-value backend.

    A missing key is reported as None, never as an error. Implementations
    raise StorageUnavailableError when the backend itself is unusable.
    """

    config_class: ClassVar[type | None] = None

    async def get(self, key: str) -> str | None:
        """Get a value.

        Args:
            key: Key to read

        Returns:
            Stored value, or None if the key does not exist
        """
        ...

    async def get_many(self, keys: list[str]) -> list[str | None]:
        """Get several values in one round trip.

        Args:
            keys: Keys to read

        Returns:
            Values in the same order as keys, None for missing keys
        """
        ...

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        """Write a value, replacing any existing one.

        Args:
            key: Key to write
            value: Value to store
            ttl_seconds: Expiry in seconds, or None to keep forever
        """
        ...

    async def compare_and_set(
        self,
        key: str,
        expected: str | None,
        value: str,
        ttl_seconds: int | None = None,
    ) -> bool:
        """Write a value only if the key still holds the expected value.

        Args:
            key: Key to write
            expected: Value read earlier, or None if the key was absent
            value: New value
            ttl_seconds: Expiry in seconds, or None to keep forever

        Returns:
            True if written, False if the key changed in the meantime
        """
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...
