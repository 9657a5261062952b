import asyncio
import contextlib
import json
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Tuple

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from weather_activities.config import Settings
from weather_activities.errors import CacheError

logger = logging.getLogger(__name__)

FORECAST_KEY_DECIMALS = 4


class CacheBackend(ABC):
    """Key-value store with per-entry TTL.

    Values are JSON-compatible structures. Implementations must never hand
    back an entry whose expiry has passed, and must raise CacheError rather
    than report a miss when their own storage fails.
    """

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def clear(self) -> None:
        ...

    async def start(self) -> None:
        """Start background maintenance, if the backend has any."""

    async def close(self) -> None:
        """Stop background maintenance and release connections."""

    async def __aenter__(self) -> "CacheBackend":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


@dataclass
class CacheEntry:
    value: Any
    expires_at: float  # time.monotonic() deadline

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class InMemoryCache(CacheBackend):
    """
    Process-local cache:
      key -> CacheEntry(value, expires_at)

    Expired entries are dropped lazily on read and by a periodic sweep task.
    There is no entry cap; once the store grows past `sweep_threshold` every
    set also purges expired entries inline.
    """

    def __init__(self, sweep_interval_seconds: float = 300.0, sweep_threshold: int = 1000):
        self.sweep_interval_seconds = sweep_interval_seconds
        self.sweep_threshold = sweep_threshold
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = asyncio.Lock()
        self._sweeper: Optional[asyncio.Task] = None

    async def get(self, key: str) -> Optional[Any]:
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                logger.debug("Cache miss (not found): %s", key)
                return None
            if entry.is_expired(time.monotonic()):
                logger.debug("Cache miss (expired): %s", key)
                del self._entries[key]
                return None
            logger.debug("Cache hit: %s", key)
            return entry.value

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        async with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=time.monotonic() + ttl_seconds)
            logger.debug("Cache set: %s (ttl=%ss, size=%d)", key, ttl_seconds, len(self._entries))
            if len(self._entries) > self.sweep_threshold:
                logger.info("Cache size %d over threshold %d, purging expired entries",
                            len(self._entries), self.sweep_threshold)
                self._purge_expired()

    async def delete(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def clear(self) -> None:
        async with self._lock:
            self._entries.clear()

    async def sweep(self) -> int:
        """Remove every expired entry; returns how many were dropped."""
        async with self._lock:
            return self._purge_expired()

    def size(self) -> int:
        """Stored entries, including expired ones not yet swept."""
        return len(self._entries)

    def _purge_expired(self) -> int:
        # caller holds self._lock
        now = time.monotonic()
        expired = [k for k, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Cache sweep removed %d expired entries (%d left)", len(expired), len(self._entries))
        return len(expired)

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            await self.sweep()

    async def start(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.create_task(self._sweep_loop())

    async def close(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sweeper
            self._sweeper = None


class RedisCache(CacheBackend):
    """
    Stores each value as JSON under the caller's key with a millisecond TTL.
    Redis expires keys itself, so there is nothing to sweep.
    """

    def __init__(self, redis_url: Optional[str] = None, client: Optional[aioredis.Redis] = None):
        if client is None:
            if redis_url is None:
                raise ValueError("RedisCache needs a redis_url or a client")
            client = aioredis.from_url(redis_url, decode_responses=True)
        self.client = client

    async def get(self, key: str) -> Optional[Any]:
        try:
            raw = await self.client.get(key)
        except RedisError as exc:
            raise CacheError("Failed to retrieve value from cache", operation="get", cache_key=key, cause=exc)
        if raw is None:
            logger.debug("Cache miss: %s", key)
            return None
        try:
            value = json.loads(raw)
        except ValueError as exc:
            raise CacheError("Failed to deserialize value from cache", operation="get", cache_key=key, cause=exc)
        logger.debug("Cache hit: %s", key)
        return value

    async def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        try:
            raw = json.dumps(value)
        except (TypeError, ValueError) as exc:
            raise CacheError("Failed to serialize value for cache storage", operation="set", cache_key=key, cause=exc)
        try:
            await self.client.set(key, raw, px=max(1, int(ttl_seconds * 1000)))
        except RedisError as exc:
            raise CacheError("Failed to store value in cache", operation="set", cache_key=key, cause=exc)

    async def delete(self, key: str) -> None:
        try:
            await self.client.delete(key)
        except RedisError as exc:
            raise CacheError("Failed to delete value from cache", operation="delete", cache_key=key, cause=exc)

    async def clear(self) -> None:
        try:
            await self.client.flushdb()
        except RedisError as exc:
            raise CacheError("Failed to clear cache", operation="clear", cause=exc)
        logger.info("Cache cleared")

    async def close(self) -> None:
        await self.client.aclose()


def _fixed(value: float, decimals: int) -> Decimal:
    # exact binary value, ties away from zero; no negative zero
    fixed = Decimal(value).quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)
    return fixed.copy_abs() if fixed.is_zero() else fixed


def rounded_coords(lat: float, lon: float, decimals: int) -> Tuple[float, float]:
    return (float(_fixed(lat, decimals)), float(_fixed(lon, decimals)))


def forecast_cache_key(lat: float, lon: float, days: int) -> str:
    """`weather:{lat}:{lon}:{days}` with coordinates fixed to 4 decimals.

    Persistent backends share this exact shape across restarts.
    """
    rlat, rlon = _fixed(lat, FORECAST_KEY_DECIMALS), _fixed(lon, FORECAST_KEY_DECIMALS)
    return f"weather:{rlat:f}:{rlon:f}:{days}"


def build_cache(settings: Settings) -> CacheBackend:
    if settings.cache_backend == "redis":
        return RedisCache(settings.redis_url)
    return InMemoryCache(
        sweep_interval_seconds=settings.cache_sweep_interval_seconds,
        sweep_threshold=settings.cache_sweep_threshold,
    )
