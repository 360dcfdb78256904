"""Rendering DI providers."""

from dishka import Scope, provide

from murmur.config import Settings
from murmur.domain.service import SettingService
from murmur.render.emoji import EmojiPackSource
from murmur.render.renderer import MarkdownRenderer
from murmur.render.sanitizer import HtmlSanitizer
from murmur.util.di.base import ProviderBase


class ProdRenderProvider(ProviderBase):
    """Renderer and sanitizer, shared by the whole application.

    Both caches live on the renderer, so it is APP-scoped.
    """

    scope = Scope.APP

    @provide
    def get_sanitizer(self) -> HtmlSanitizer:
        return HtmlSanitizer()

    @provide
    def get_renderer(
        self,
        settings: Settings,
        sanitizer: HtmlSanitizer,
        emoji_source: EmojiPackSource,
        setting_service: SettingService,
    ) -> MarkdownRenderer:
        """Provide the Markdown renderer.

        The renderer follows emoji pack setting changes; the initial pack is
        loaded at application startup.
        """
        renderer = MarkdownRenderer(
            sanitizer=sanitizer,
            emoji_source=emoji_source,
            cache_capacity=settings.render.cache_capacity,
            cache_ttl_seconds=settings.render.cache_ttl_seconds,
        )
        setting_service.subscribe(renderer.on_setting_changed)
        return renderer
