from __future__ import annotations

import redis


def build_redis_client(redis_url: str, timeout_seconds: float = 1.0) -> redis.Redis:
    return redis.Redis.from_url(
        redis_url,
        socket_connect_timeout=timeout_seconds,
        socket_timeout=timeout_seconds,
    )


def ping_redis(client: redis.Redis | None) -> bool:
    if client is None:
        return False
    try:
        return bool(client.ping())
    except Exception:
        return False
