"""Rate-limit counter store providers."""

from collections.abc import AsyncIterator

from dishka import Scope, provide
import logfire

from murmur.adapter.cache import InMemoryCacheService, RedisCacheService
from murmur.config import Settings
from murmur.domain.service import CacheService
from murmur.util.di.base import ProviderBase


class CacheProvider(ProviderBase):
    """Cache component base."""

    __mock_component__ = "cache"


class ProdCacheProvider(CacheProvider):
    """Redis when configured, otherwise a per-process counter store."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    async def get_cache_service(
        self, settings: Settings
    ) -> AsyncIterator[CacheService]:
        if settings.redis.url:
            cache: CacheService = RedisCacheService.from_url(settings.redis.url)
        else:
            logfire.warn("No Redis configured, rate limits are per process")
            cache = InMemoryCacheService()
        yield cache
        await cache.close()
