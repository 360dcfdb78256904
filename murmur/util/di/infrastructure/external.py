"""External service providers (HTTP APIs and file links)."""

from dishka import Scope, provide

from murmur.adapter.classifier import HttpContentClassifier
from murmur.adapter.emoji import HttpEmojiPackSource
from murmur.adapter.file import SignedFileUrlService
from murmur.adapter.pushoo import HttpPushooService
from murmur.adapter.qq import HttpQQProfileClient
from murmur.application.usecase.comment import FileService
from murmur.config import Settings
from murmur.domain.service import (
    ContentClassifier,
    PushooService,
    QQProfileClient,
    SettingService,
)
from murmur.render.emoji import EmojiPackSource
from murmur.util.di.base import ProviderBase
from murmur.util.ids import IdCodec


class ExternalProvider(ProviderBase):
    """External services component base."""

    __mock_component__ = "external"


class ProdExternalProvider(ExternalProvider):
    """Production clients talking to the configured HTTP services."""

    __is_mock__ = False

    scope = Scope.APP

    @provide
    def get_content_classifier(self) -> ContentClassifier:
        """Provide AI content classifier client."""
        return HttpContentClassifier()

    @provide
    def get_qq_profile_client(self) -> QQProfileClient:
        """Provide QQ profile client."""
        return HttpQQProfileClient()

    @provide
    def get_pushoo_service(self, setting_service: SettingService) -> PushooService:
        """Provide instant push client."""
        return HttpPushooService(setting_service)

    @provide
    def get_emoji_pack_source(self, settings: Settings) -> EmojiPackSource:
        """Provide emoji pack downloader."""
        return HttpEmojiPackSource(timeout=settings.render.emoji_fetch_timeout)

    @provide
    def get_file_service(self, settings: Settings, id_codec: IdCodec) -> FileService:
        """Provide signed file link builder."""
        return SignedFileUrlService(
            signing_secret=settings.file.signing_secret,
            id_codec=id_codec,
            download_prefix=settings.file.download_prefix,
        )
