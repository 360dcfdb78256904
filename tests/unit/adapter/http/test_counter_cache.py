"""Unit tests for the in-process counter store."""

import pytest

from murmur.adapter.cache import InMemoryCacheService


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class TestInMemoryCacheService:
    """Tests for InMemoryCacheService."""

    @pytest.mark.asyncio
    async def test_increment_counts_per_key(self):
        cache = InMemoryCacheService()

        assert await cache.increment("a") == 1
        assert await cache.increment("a") == 2
        assert await cache.increment("b") == 1

    @pytest.mark.asyncio
    async def test_counter_resets_after_expiry(self):
        # Arrange
        clock = FakeClock()
        cache = InMemoryCacheService(clock=clock)
        await cache.increment("ip")
        await cache.expire("ip", 60)

        # Act
        clock.now = 59.0
        before = await cache.increment("ip")
        clock.now = 61.0
        after = await cache.increment("ip")

        # Assert
        assert (before, after) == (2, 1)

    @pytest.mark.asyncio
    async def test_close_clears_counters(self):
        cache = InMemoryCacheService()
        await cache.increment("a")

        await cache.close()

        assert await cache.increment("a") == 1
