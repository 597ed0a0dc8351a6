"""Redis infrastructure for guest_knows."""

from guest_knows.infra.redis.client import RedisKeyValueStore

__all__ = ["RedisKeyValueStore"]
