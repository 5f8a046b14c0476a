from __future__ import annotations

import redis

from orderbot.application.ports.cache import CacheStore


class RedisCacheStore(CacheStore):
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    def get(self, key: str) -> str | None:
        value = self._client.get(key)
        if value is None:
            return None
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return str(value)

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._client.set(name=key, value=value, ex=ttl_seconds)


class NullCacheStore(CacheStore):
    """Used when no Redis is configured; every lookup misses."""

    def get(self, key: str) -> str | None:
        return None

    def set(self, key: str, value: str, ttl_seconds: int) -> None:
        return None
