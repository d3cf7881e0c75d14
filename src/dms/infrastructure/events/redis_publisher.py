"""Event publishers for the POS push channel.

The WebSocket bridge subscribes to a Redis channel and relays every
message to connected POS screens; events are JSON ``{"type", "data"}``.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import redis

from dms.domain.events import EventPublisher, EventType

logger = logging.getLogger(__name__)


class RedisEventPublisher(EventPublisher):

    def __init__(self, redis_url: str, channel: str, client: redis.Redis | None = None) -> None:
        self._redis_url = redis_url
        self._channel = channel
        self._client = client

    def _get_client(self) -> redis.Redis | None:
        if self._client is None:
            try:
                client = redis.from_url(self._redis_url)
                client.ping()
            except redis.RedisError as exc:
                logger.warning("Redis unavailable at %s: %s", self._redis_url, exc)
                return None
            self._client = client
        return self._client

    def publish(self, event_type: EventType, payload: dict[str, Any]) -> None:
        client = self._get_client()
        if client is None:
            return
        message = json.dumps({"type": event_type.value, "data": payload}, default=str)
        try:
            client.publish(self._channel, message)
        except redis.RedisError as exc:
            # Reconnect on the next event.
            self._client = None
            logger.warning("Failed to publish %s: %s", event_type.value, exc)


class LoggingEventPublisher(EventPublisher):
    """Used when no Redis URL is configured."""

    def publish(self, event_type: EventType, payload: dict[str, Any]) -> None:
        logger.debug("Event %s: %s", event_type.value, payload)
