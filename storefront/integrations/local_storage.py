"""Durable key-value storage for device-scoped state (cart, auth token).

Backed by Redis when ``REDIS_URL`` is configured; otherwise, or after a
Redis failure, values live in process memory.
"""
from __future__ import annotations

import logging
from typing import Any

import redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import ResponseError as RedisResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

logger = logging.getLogger(__name__)

REDIS_OUTAGE_ERRORS = (RedisConnectionError, RedisTimeoutError)


class LocalStorage:
    """String key-value store with the get/set/remove surface of browser storage."""

    def __init__(self, redis_url: str | None = None, namespace: str = "storefront"):
        self._redis_url = redis_url
        self._namespace = namespace
        self._memory: dict[str, str] = {}
        self._client = self._init_client()

    @property
    def is_persistent(self) -> bool:
        return self._client is not None

    def _init_client(self) -> Any | None:
        if not self._redis_url:
            logger.info("REDIS_URL is not set; local storage uses in-memory mode")
            return None

        try:
            client = redis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            logger.info("Redis local storage enabled")
            return client
        except Exception as exc:
            logger.warning("Redis local storage init failed, fallback to in-memory: %s", exc)
            return None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis local storage fallback to memory mode: %s", reason)
        self._client = None

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get(self, key: str) -> str | None:
        """Stored value, or None when missing or unreadable."""
        if self._client:
            try:
                return self._client.get(self._key(key))
            except REDIS_OUTAGE_ERRORS as exc:
                self._switch_to_memory_fallback(exc)
            except (UnicodeDecodeError, RedisResponseError) as exc:
                logger.warning("Unreadable value under %s ignored: %s", key, exc)
                return None
        return self._memory.get(key)

    def set(self, key: str, value: str) -> None:
        # Keep memory in sync so a later fallback still sees the last write
        self._memory[key] = value
        if self._client:
            try:
                self._client.set(self._key(key), value)
            except REDIS_OUTAGE_ERRORS as exc:
                self._switch_to_memory_fallback(exc)

    def remove(self, key: str) -> None:
        self._memory.pop(key, None)
        if self._client:
            try:
                self._client.delete(self._key(key))
            except REDIS_OUTAGE_ERRORS as exc:
                self._switch_to_memory_fallback(exc)
