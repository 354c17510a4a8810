"""
parking_access.cache.accessor

Cache-aside read path.

Responsibilities:
- Serve reads from cache when allowed, otherwise run the loader and populate.
- Honor the client's bypass directive (skip the read, still write the fresh value).
- Degrade to the loader when the cache is slow or unavailable.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from typing import Any

from parking_access.cache.backends import Cache
from parking_access.errors import DependencyUnavailable
from parking_access.observability.logging import get_logger
from parking_access.settings import Settings

log = get_logger(__name__)

Loader = Callable[[], Awaitable[Any]]


class CacheAside:
    """
    Read-through accessor over an injected `Cache`.

    There is no single-flight: concurrent misses on one key each run the loader and
    the last write wins.
    """

    def __init__(self, *, cache: Cache, ttl_seconds: int, timeout_seconds: float) -> None:
        self._cache = cache
        self._ttl = ttl_seconds
        self._timeout = timeout_seconds

    @classmethod
    def from_settings(cls, cache: Cache, settings: Settings) -> CacheAside:
        return cls(
            cache=cache,
            ttl_seconds=settings.cache_ttl_seconds,
            timeout_seconds=settings.cache_timeout_seconds,
        )

    async def read_through(
        self,
        key: str,
        loader: Loader,
        *,
        ttl: int | None = None,
        bypass: bool = False,
    ) -> Any:
        if bypass:
            log.debug("cache.bypass", key=key)
        else:
            cached = await self._get(key)
            if cached is not None:
                try:
                    value = json.loads(cached)
                except (ValueError, UnicodeDecodeError) as e:
                    log.warning("cache.decode_failed", key=key, error=str(e))
                else:
                    log.debug("cache.hit", key=key)
                    return value
            log.debug("cache.miss", key=key)

        # Loader errors (AccessDenied, NotFound, store failures) propagate and are
        # never cached.
        value = await loader()
        await self._set(key, json.dumps(value, separators=(",", ":")).encode(), ttl or self._ttl)
        return value

    async def _get(self, key: str) -> bytes | None:
        try:
            return await asyncio.wait_for(self._cache.get(key), timeout=self._timeout)
        except (DependencyUnavailable, TimeoutError) as e:
            log.warning("cache.degraded", op="get", key=key, error=str(e) or type(e).__name__)
            return None

    async def _set(self, key: str, payload: bytes, ttl: int) -> None:
        # Shielded so a disconnecting client cannot cancel a half-issued write.
        write = asyncio.ensure_future(self._cache.set(key, payload, ttl))
        write.add_done_callback(_consume_result)
        try:
            await asyncio.wait_for(asyncio.shield(write), timeout=self._timeout)
        except (DependencyUnavailable, TimeoutError) as e:
            log.warning("cache.degraded", op="set", key=key, error=str(e) or type(e).__name__)


def _consume_result(task: asyncio.Future[Any]) -> None:
    # A write can outlive its caller (timeout or cancellation); its failure is
    # retrieved here so asyncio does not report it as never retrieved.
    if not task.cancelled():
        task.exception()


# --- Module Notes -----------------------------------------------------------
# Mutations do not touch the cache. Entries written before a mutation stay visible
# until their TTL expires; clients needing fresh data send `Cache-Control: no-cache`.
