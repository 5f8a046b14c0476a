from __future__ import annotations

import logging

import redis

from orderbot.application.ports.publisher import EventPublisher

logger = logging.getLogger(__name__)


class RedisEventPublisher(EventPublisher):
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    def publish(self, channel: str, message: str) -> None:
        self._client.publish(channel, message)


class LoggingEventPublisher(EventPublisher):
    """Fallback when no Redis is configured; events are only logged."""

    def publish(self, channel: str, message: str) -> None:
        logger.debug("event_not_published", extra={"channel": channel})
