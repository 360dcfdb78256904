"""Markdown to safe HTML rendering.

``to_html`` runs comment source through these steps:

1. Diagram containers are replaced with placeholder tokens.
2. ``:name:`` emoji shorthand is expanded to icon markup.
3. Markdown is converted to HTML and bare URLs are linkified.
4. The result is sanitized and the diagram containers are restored.

Rendered and sanitized HTML are cached separately, keyed by the input text.
The caches are an optimization only: clearing them never changes output.
"""

import asyncio
import threading

import logfire
import markdown
from bleach.callbacks import nofollow
from bleach.linkifier import Linker

from murmur.render.cache import RenderCache
from murmur.render.emoji import EmojiPackSource, EmojiReplacer
from murmur.render.protect import extract_protected_blocks
from murmur.render.sanitizer import HtmlSanitizer

EMOJI_SETTING_KEY = "comment.emoji_cdn"

MARKDOWN_EXTENSIONS = [
    "extra",  # tables, fenced code, footnotes, attribute lists
    "sane_lists",
    "nl2br",
]


class MarkdownRenderer:
    """Converts comment Markdown into sanitized HTML."""

    def __init__(
        self,
        sanitizer: HtmlSanitizer,
        emoji_source: EmojiPackSource,
        cache_capacity: int = 500,
        cache_ttl_seconds: float = 30 * 60,
    ) -> None:
        """Initialize the renderer.

        Args:
            sanitizer: Allow-list sanitizer applied to every output
            emoji_source: Loader for emoji pack documents
            cache_capacity: Entries per cache
            cache_ttl_seconds: Lifetime of a cache entry
        """
        self.sanitizer = sanitizer
        self.emoji_source = emoji_source
        self.html_cache = RenderCache(cache_capacity, cache_ttl_seconds)
        self.sanitize_cache = RenderCache(cache_capacity, cache_ttl_seconds)

        # Swapped as a whole, never mutated
        self._replacer = EmojiReplacer.empty()
        self._linker = Linker(callbacks=[nofollow], skip_tags={"pre", "code"})
        self._linker_lock = threading.Lock()
        self._refresh_tasks: set[asyncio.Task[None]] = set()

    @property
    def emoji_count(self) -> int:
        return len(self._replacer)

    def to_html(self, content: str) -> str:
        """Render Markdown ``content`` to sanitized HTML."""
        cached = self.html_cache.get(content)
        if cached is not None:
            return cached

        replacer = self._replacer
        text, blocks = extract_protected_blocks(content)
        text = replacer.replace(text)

        converted = markdown.markdown(
            text, extensions=MARKDOWN_EXTENSIONS, output_format="html"
        )
        with self._linker_lock:
            converted = self._linker.linkify(converted)

        rendered = self.sanitizer.clean(converted)
        if blocks:
            rendered = blocks.restore(rendered)

        # A pack swap during rendering means this output may embed stale icons
        if replacer is self._replacer:
            self.html_cache.set(content, rendered)
        return rendered

    def sanitize_html(self, fragment: str) -> str:
        """Sanitize already-rendered HTML, keeping diagram containers intact."""
        cached = self.sanitize_cache.get(fragment)
        if cached is not None:
            return cached

        cleaned = self.sanitizer.sanitize(fragment)
        self.sanitize_cache.set(fragment, cleaned)
        return cleaned

    def clear_caches(self) -> None:
        self.html_cache.clear()
        self.sanitize_cache.clear()

    async def load_emoji_pack(self, url: str) -> None:
        """Replace the active emoji set with the pack at ``url``.

        An empty URL disables substitution. A pack that cannot be loaded
        also disables substitution; the failure is logged, not raised.
        Both caches are cleared in every case.
        """
        with logfire.span("markdown_renderer.load_emoji_pack", url=url):
            if not url:
                replacer = EmojiReplacer.empty()
                logfire.info("Emoji substitution disabled")
            else:
                try:
                    packs = await self.emoji_source.fetch(url)
                    replacer = EmojiReplacer.from_pack(packs)
                    logfire.info("Emoji pack loaded", url=url, emojis=len(replacer))
                except Exception as e:
                    logfire.warn(
                        "Emoji pack refresh failed, substitution disabled",
                        url=url,
                        error=str(e),
                    )
                    replacer = EmojiReplacer.empty()

            self._replacer = replacer
            self.clear_caches()

    def on_setting_changed(self, key: str, value: str) -> None:
        """Settings subscriber: reload the emoji pack in the background."""
        if key != EMOJI_SETTING_KEY:
            return
        task = asyncio.get_running_loop().create_task(self.load_emoji_pack(value))
        self._refresh_tasks.add(task)
        task.add_done_callback(self._refresh_tasks.discard)

    async def wait_for_refresh(self) -> None:
        """Wait for in-flight emoji pack reloads."""
        if self._refresh_tasks:
            await asyncio.gather(*list(self._refresh_tasks))
