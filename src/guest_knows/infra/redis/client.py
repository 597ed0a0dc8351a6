"""Redis key-value backend for guest_knows.

This module provides the async Redis implementation of
KeyValueStoreInterface used by the knowledge store in production.
"""

from typing import Any, Self

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from guest_knows.config import RedisSettings
from guest_knows.errors import StorageUnavailableError
from guest_knows.interfaces.storage import KeyValueStoreInterface
from guest_knows.logging import get_logger

__all__ = [
    "RedisKeyValueStore",
]

logger = get_logger(__name__)

# KEYS[1] key; ARGV: expect-absent flag, expected value, new value, ttl (0 = none)
_COMPARE_AND_SET = """
local current = redis.call('GET', KEYS[1])
if ARGV[1] == '1' then
  if current then return 0 end
elseif current ~= ARGV[2] then
  return 0
end
local ttl = tonumber(ARGV[4])
if ttl > 0 then
  redis.call('SET', KEYS[1], ARGV[3], 'EX', ttl)
else
  redis.call('SET', KEYS[1], ARGV[3])
end
return 1
"""


class RedisKeyValueStore(KeyValueStoreInterface):
    """Async Redis implementation of KeyValueStoreInterface.

    If Redis is unreachable, each operation retries connect() first and
    raises StorageUnavailableError only if that fails too, so a store
    built while Redis was down recovers once it comes back. Errors on a
    live connection also raise StorageUnavailableError.

    Example:
        async with RedisKeyValueStore(RedisSettings()) as kv:
            await kv.put("key", "value", ttl_seconds=60)
            value = await kv.get("key")
    """

    config_class = RedisSettings

    def __init__(self, settings: RedisSettings, client: Redis | None = None) -> None:
        """Initialize store with settings.

        Args:
            settings: Redis connection settings
            client: Pre-built client (skips connect() URL handling)
        """
        self._settings = settings
        self._prefix = settings.key_prefix
        self._redis: Redis | None = client
        self._cas_script: Any = client.register_script(_COMPARE_AND_SET) if client else None

    @classmethod
    async def from_config(cls, config: RedisSettings) -> Self:
        """Factory method for orchestrator instantiation.

        Args:
            config: Redis settings

        Returns:
            Connected RedisKeyValueStore instance
        """
        store = cls(config)
        await store.connect()
        return store

    @classmethod
    async def from_dict(cls, config: dict[str, Any]) -> Self:
        """Factory method for custom config dict.

        Args:
            config: Dictionary with Redis settings

        Returns:
            Connected RedisKeyValueStore instance
        """
        return await cls.from_config(RedisSettings(**config))

    @property
    def is_connected(self) -> bool:
        return self._redis is not None

    async def connect(self) -> bool:
        """Open and verify the Redis connection.

        Returns:
            True if connected, False if Redis could not be reached
        """
        if self._redis is not None:
            return True

        client = Redis.from_url(self._settings.url, decode_responses=True)
        try:
            await client.ping()
        except (RedisConnectionError, RedisTimeoutError, OSError) as e:
            await client.aclose()
            logger.warning("redis_connection_failed", error=str(e))
            return False

        self._redis = client
        self._cas_script = client.register_script(_COMPARE_AND_SET)
        logger.info("connected_to_redis", key_prefix=self._prefix or None)
        return True

    async def close(self) -> None:
        """Close connection to Redis."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            self._cas_script = None
            logger.info("disconnected_from_redis")

    async def _client(self) -> Redis:
        """Return the live client, reconnecting if an earlier connect failed."""
        if self._redis is None and not await self.connect():
            raise StorageUnavailableError("Redis key-value store is not connected")
        assert self._redis is not None
        return self._redis

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> str | None:
        client = await self._client()
        try:
            return await client.get(self._key(key))
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StorageUnavailableError(f"Redis GET failed: {e}") from e

    async def get_many(self, keys: list[str]) -> list[str | None]:
        if not keys:
            return []
        client = await self._client()
        try:
            return await client.mget([self._key(k) for k in keys])
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StorageUnavailableError(f"Redis MGET failed: {e}") from e

    async def put(self, key: str, value: str, ttl_seconds: int | None = None) -> None:
        client = await self._client()
        try:
            await client.set(self._key(key), value, ex=ttl_seconds)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StorageUnavailableError(f"Redis SET failed: {e}") from e

    async def compare_and_set(
        self,
        key: str,
        expected: str | None,
        value: str,
        ttl_seconds: int | None = None,
    ) -> bool:
        await self._client()
        args = [
            "1" if expected is None else "0",
            expected or "",
            value,
            ttl_seconds or 0,
        ]
        try:
            written = await self._cas_script(keys=[self._key(key)], args=args)
        except (RedisConnectionError, RedisTimeoutError) as e:
            raise StorageUnavailableError(f"Redis compare-and-set failed: {e}") from e
        return bool(written)

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()
