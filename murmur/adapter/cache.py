"""Counter stores for rate limiting."""

import asyncio
import time
from collections.abc import Callable

import redis.asyncio as redis

from murmur.domain.service.moderation_service import CacheService


class RedisCacheService(CacheService):
    """Counters shared by every instance, kept in Redis."""

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCacheService":
        return cls(redis.from_url(url, decode_responses=True))

    async def increment(self, key: str) -> int:
        return int(await self.client.incr(key))

    async def expire(self, key: str, seconds: int) -> None:
        await self.client.expire(key, seconds)

    async def close(self) -> None:
        await self.client.aclose()


class InMemoryCacheService(CacheService):
    """Process-local counters, for single-instance deployments and tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._values: dict[str, int] = {}
        self._deadlines: dict[str, float] = {}
        self._lock = asyncio.Lock()

    def _evict(self, key: str) -> None:
        deadline = self._deadlines.get(key)
        if deadline is not None and deadline <= self._clock():
            self._values.pop(key, None)
            self._deadlines.pop(key, None)

    async def increment(self, key: str) -> int:
        async with self._lock:
            self._evict(key)
            self._values[key] = self._values.get(key, 0) + 1
            return self._values[key]

    async def expire(self, key: str, seconds: int) -> None:
        async with self._lock:
            if key in self._values:
                self._deadlines[key] = self._clock() + seconds

    async def close(self) -> None:
        async with self._lock:
            self._values.clear()
            self._deadlines.clear()
