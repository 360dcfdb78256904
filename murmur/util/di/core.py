"""Core DI providers (non-mockable)."""

from dishka import Scope, provide

from murmur.config import APISettings, AuthSettings, Settings
from murmur.util.di.base import ProviderBase
from murmur.util.ids import IdCodec


class ProdConfigProvider(ProviderBase):
    """Production config provider - concrete, no mocks needed.

    Settings are loaded from environment variables and .env file automatically.
    """

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        """Provide application settings from environment."""
        return Settings()

    @provide(scope=Scope.APP)
    def provide_auth_settings(self, settings: Settings) -> AuthSettings:
        """Provide auth settings."""
        return settings.auth

    @provide(scope=Scope.APP)
    def provide_api_settings(self, settings: Settings) -> APISettings:
        return settings.api

    @provide(scope=Scope.APP)
    def provide_id_codec(self, settings: Settings) -> IdCodec:
        """Provide the public id codec."""
        return IdCodec(min_length=settings.ids.min_length, seed=settings.ids.seed)
