"""Counter store backed by Redis."""
from __future__ import annotations

import logging
from typing import Protocol

import redis

from tikky.core.config import Settings

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the counter store cannot complete an operation."""


class CounterStore(Protocol):
    def increment(self, key: str) -> int: ...
    def get(self, key: str) -> int | None: ...
    def ping(self) -> None: ...
    def close(self) -> None: ...


class RedisCounterStore:
    def __init__(self, settings: Settings):
        self.pool = redis.BlockingConnectionPool(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password or None,
            max_connections=settings.redis_pool_size,
            timeout=settings.redis_socket_timeout,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_connect_timeout,
            decode_responses=True,
        )
        self.client = redis.Redis(connection_pool=self.pool)

    def increment(self, key: str) -> int:
        try:
            return int(self.client.incr(key))
        except redis.RedisError as exc:
            raise StoreError(f"INCR {key} failed: {exc}") from exc

    def get(self, key: str) -> int | None:
        try:
            value = self.client.get(key)
        except redis.RedisError as exc:
            raise StoreError(f"GET {key} failed: {exc}") from exc
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise StoreError(f"value at {key} is not an integer: {value!r}") from exc

    def ping(self) -> None:
        try:
            self.client.ping()
        except redis.RedisError as exc:
            raise StoreError(f"PING failed: {exc}") from exc

    def close(self) -> None:
        self.client.close()
        self.pool.disconnect()


def connect_store(settings: Settings) -> RedisCounterStore:
    """Build the Redis store and make sure it answers before it is used."""
    store = RedisCounterStore(settings)
    try:
        store.ping()
    except StoreError:
        store.close()
        raise
    logger.info(
        "redis store ready",
        extra={
            "event": {
                "addr": settings.redis_addr,
                "db": settings.redis_db,
                "pool_size": settings.redis_pool_size,
            }
        },
    )
    return store
