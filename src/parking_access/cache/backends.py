"""
parking_access.cache.backends

Key-value cache collaborators.

Responsibilities:
- Define the `Cache` interface the accessor depends on (get / set-with-expiry).
- Provide a Redis implementation (production) and an in-process TTL map (dev/test).
- Translate transport failures into `DependencyUnavailable`.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

import redis.asyncio as redis
from cachetools import TLRUCache
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
from redis.exceptions import RedisError

from parking_access.errors import DependencyUnavailable
from parking_access.observability.logging import get_logger
from parking_access.settings import Settings

log = get_logger(__name__)


class Cache(Protocol):
    async def get(self, key: str) -> bytes | None: ...

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None: ...

    async def close(self) -> None: ...


class RedisCache:
    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> RedisCache:
        # Socket timeouts mirror the accessor's round-trip budget and retries are off,
        # so a dead server fails fast instead of holding the request.
        client = redis.from_url(
            settings.redis_url,
            socket_connect_timeout=settings.cache_timeout_seconds,
            socket_timeout=settings.cache_timeout_seconds,
            retry=Retry(NoBackoff(), 0),
            health_check_interval=30,
        )
        return cls(client)

    async def get(self, key: str) -> bytes | None:
        try:
            return await self._client.get(key)
        except (RedisError, OSError) as e:
            raise DependencyUnavailable("cache", str(e)) from e

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        try:
            await self._client.set(key, value, ex=ttl_seconds)
        except (RedisError, OSError) as e:
            raise DependencyUnavailable("cache", str(e)) from e

    async def close(self) -> None:
        await self._client.aclose()


class InMemoryCache:
    """
    Process-local cache with the same contract as `RedisCache`.

    Backed by a `cachetools.TLRUCache`, so each entry expires at its own write time
    plus TTL. Expired entries are purged on every write and the map never holds more
    than `max_entries`. Single-key operations are atomic because they never await.
    """

    def __init__(
        self, *, max_entries: int = 10_000, clock: Callable[[], float] = time.monotonic
    ) -> None:
        self._entries: TLRUCache[str, tuple[bytes, int]] = TLRUCache(
            maxsize=max_entries, ttu=_expires_at, timer=clock
        )

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> bytes | None:
        entry = self._entries.get(key)
        return None if entry is None else entry[0]

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        self._entries[key] = (value, ttl_seconds)

    async def close(self) -> None:
        self._entries.clear()


def _expires_at(key: str, entry: tuple[bytes, int], now: float) -> float:
    return now + entry[1]


def create_cache(settings: Settings) -> Cache:
    if settings.redis_url:
        log.info("cache.backend", backend="redis")
        return RedisCache.from_settings(settings)
    log.info("cache.backend", backend="memory", max_entries=settings.cache_max_entries)
    return InMemoryCache(max_entries=settings.cache_max_entries)


# --- Module Notes -----------------------------------------------------------
# Backends raise; the accessor decides that cache failures never fail a request.
