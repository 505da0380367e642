"""
Key-value store backends.
Redis in deployed environments; an in-process store for development and tests.
"""

import fnmatch
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional, Tuple

import redis.asyncio as aioredis

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Async key-value operations used by the cache, rate limiter and revocation list."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Get a value, or None when missing or expired."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        """Set a value with an optional time-to-live."""

    @abstractmethod
    async def delete(self, *keys: str) -> int:
        """Delete keys, returning how many existed."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check whether a live key exists."""

    @abstractmethod
    async def incr_with_expiry(self, key: str, ttl_seconds: int) -> int:
        """Increment a counter and (re)arm its expiry in one step."""

    @abstractmethod
    async def delete_pattern(self, pattern: str) -> int:
        """Delete every key matching a glob pattern."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class RedisKeyValueStore(KeyValueStore):
    """Redis-backed store using redis.asyncio."""

    def __init__(self, redis_url: str, socket_timeout: float = 5.0):
        self.redis_url = redis_url
        self.client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )

    async def get(self, key: str) -> Optional[str]:
        return await self.client.get(key)

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        if ttl_seconds:
            await self.client.set(key, value, ex=ttl_seconds)
        else:
            await self.client.set(key, value)

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        return int(await self.client.delete(*keys))

    async def exists(self, key: str) -> bool:
        return bool(await self.client.exists(key))

    async def incr_with_expiry(self, key: str, ttl_seconds: int) -> int:
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.incr(key)
            pipe.expire(key, ttl_seconds)
            results = await pipe.execute()
        return int(results[0])

    async def delete_pattern(self, pattern: str) -> int:
        # SCAN instead of KEYS so large keyspaces do not block the server
        deleted = 0
        batch = []
        async for key in self.client.scan_iter(match=pattern, count=500):
            batch.append(key)
            if len(batch) >= 500:
                deleted += await self.delete(*batch)
                batch = []
        if batch:
            deleted += await self.delete(*batch)
        return deleted

    async def ping(self) -> bool:
        return bool(await self.client.ping())

    async def close(self) -> None:
        await self.client.aclose()


class InMemoryKeyValueStore(KeyValueStore):
    """Simple in-process store for development and tests. Not shared across processes."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._data: Dict[str, Tuple[str, Optional[float]]] = {}

    def _live(self, key: str) -> Optional[str]:
        entry = self._data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self._data[key]
            return None
        return value

    async def get(self, key: str) -> Optional[str]:
        return self._live(key)

    async def set(self, key: str, value: str, ttl_seconds: Optional[int] = None) -> None:
        expires_at = self._clock() + ttl_seconds if ttl_seconds else None
        self._data[key] = (str(value), expires_at)

    async def delete(self, *keys: str) -> int:
        deleted = 0
        for key in keys:
            if self._live(key) is not None:
                deleted += 1
            self._data.pop(key, None)
        return deleted

    async def exists(self, key: str) -> bool:
        return self._live(key) is not None

    async def incr_with_expiry(self, key: str, ttl_seconds: int) -> int:
        current = int(self._live(key) or 0) + 1
        self._data[key] = (str(current), self._clock() + ttl_seconds)
        return current

    async def delete_pattern(self, pattern: str) -> int:
        matching = [key for key in list(self._data) if fnmatch.fnmatchcase(key, pattern)]
        return await self.delete(*matching)


def create_key_value_store(redis_url: Optional[str]) -> KeyValueStore:
    """Build the store for the configured URL."""
    if redis_url:
        logger.info("Using Redis key-value store")
        return RedisKeyValueStore(redis_url)
    logger.info("Using in-memory key-value store")
    return InMemoryKeyValueStore()
