"""Unit tests for MarkdownRenderer."""

import pytest

from murmur.adapter.error import ProviderError
from murmur.domain.service import SettingService
from murmur.render.cache import RenderCache
from murmur.render.renderer import EMOJI_SETTING_KEY, MarkdownRenderer
from murmur.render.sanitizer import HtmlSanitizer
from tests.di import StaticEmojiPackSource

PACK_URL = "https://cdn.example/emoji.json"

PACK = {
    "bilibili": {
        "type": "image",
        "container": [
            {"icon": "<img src='https://cdn.example/wave.png'>", "text": "wave"},
            {"icon": "<img src='https://cdn.example/wave2.png'>", "text": "wave2"},
        ],
    },
    "broken": "not a pack",
}


class FailingEmojiPackSource(StaticEmojiPackSource):
    async def fetch(self, url):
        raise ProviderError("cdn down")


class CountingSanitizer(HtmlSanitizer):
    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    def sanitize(self, fragment: str) -> str:
        self.calls += 1
        return super().sanitize(fragment)


class StepClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def make_renderer(source=None) -> MarkdownRenderer:
    return MarkdownRenderer(
        sanitizer=HtmlSanitizer(), emoji_source=source or StaticEmojiPackSource()
    )


class TestMarkdownRenderer:
    """Tests for MarkdownRenderer."""

    def test_markdown_is_converted(self):
        html = make_renderer().to_html("**bold** and `code`")

        assert "<strong>bold</strong>" in html
        assert "<code>code</code>" in html

    def test_unsafe_markup_is_stripped(self):
        html = make_renderer().to_html(
            "<script>alert(1)</script>\n\n[click](javascript:alert(1))"
        )

        assert "<script" not in html
        assert "javascript:" not in html

    def test_bare_urls_are_linkified_with_nofollow(self):
        html = make_renderer().to_html("see https://example.com/page")

        assert 'href="https://example.com/page"' in html
        assert "nofollow" in html

    def test_diagram_blocks_pass_through_verbatim(self):
        block = (
            '<div class="md-editor-mermaid"><svg viewBox="0 0 4 4">'
            '<path d="M0 0L4 4"></path></svg></div>'
        )

        html = make_renderer().to_html(f"before\n\n{block}\n\nafter")

        assert block in html
        assert "before" in html
        assert "after" in html

    def test_text_and_headings_are_not_rewritten(self):
        html = make_renderer().to_html('# Title\n\nShe said "hi" -- ok')

        assert "&ldquo;" not in html
        assert "&ndash;" not in html
        assert "id=" not in html
        assert "<h1>Title</h1>" in html

    def test_output_is_cached_by_content(self):
        renderer = make_renderer()

        first = renderer.to_html("hello")

        assert len(renderer.html_cache) == 1
        assert renderer.to_html("hello") == first

    @pytest.mark.asyncio
    async def test_emoji_pack_expands_shorthand(self):
        # Arrange
        renderer = make_renderer(StaticEmojiPackSource(PACK))

        # Act
        await renderer.load_emoji_pack(PACK_URL)
        html = renderer.to_html("hi :wave: and :wave2:")

        # Assert
        assert renderer.emoji_count == 2
        assert 'src="https://cdn.example/wave.png"' in html
        assert 'src="https://cdn.example/wave2.png"' in html
        assert 'class="anzhiyu-owo-emotion"' in html
        assert 'alt="wave"' in html
        assert ":wave:" not in html

    @pytest.mark.asyncio
    async def test_loading_a_pack_clears_cached_output(self):
        renderer = make_renderer(StaticEmojiPackSource(PACK))
        before = renderer.to_html("hi :wave:")
        assert ":wave:" in before

        await renderer.load_emoji_pack(PACK_URL)

        assert "wave.png" in renderer.to_html("hi :wave:")

    @pytest.mark.asyncio
    async def test_failed_pack_load_disables_substitution(self):
        renderer = make_renderer(StaticEmojiPackSource(PACK))
        await renderer.load_emoji_pack(PACK_URL)
        renderer.emoji_source = FailingEmojiPackSource()

        await renderer.load_emoji_pack("https://cdn.example/other.json")

        assert renderer.emoji_count == 0
        assert ":wave:" in renderer.to_html("hi :wave:")

    @pytest.mark.asyncio
    async def test_emoji_setting_change_reloads_pack(self):
        # Arrange
        source = StaticEmojiPackSource(PACK)
        renderer = make_renderer(source)
        settings = SettingService()
        settings.subscribe(renderer.on_setting_changed)

        # Act
        settings.update({"comment.show_ua": "false", EMOJI_SETTING_KEY: PACK_URL})
        await renderer.wait_for_refresh()

        # Assert
        assert source.fetched == [PACK_URL]
        assert renderer.emoji_count == 2


class TestSanitizeHtml:
    """Tests for MarkdownRenderer.sanitize_html."""

    def test_repeated_fragment_is_served_from_cache(self):
        # Arrange
        sanitizer = CountingSanitizer()
        renderer = MarkdownRenderer(
            sanitizer=sanitizer, emoji_source=StaticEmojiPackSource()
        )
        fragment = '<p onclick="x()">hi</p><script>alert(1)</script>'

        # Act
        first = renderer.sanitize_html(fragment)
        second = renderer.sanitize_html(fragment)

        # Assert
        assert first == second
        assert "<script" not in first
        assert sanitizer.calls == 1
        assert len(renderer.sanitize_cache) == 1

    def test_expired_entry_is_sanitized_again(self):
        # Arrange
        sanitizer = CountingSanitizer()
        renderer = MarkdownRenderer(
            sanitizer=sanitizer, emoji_source=StaticEmojiPackSource()
        )
        clock = StepClock()
        renderer.sanitize_cache = RenderCache(capacity=10, ttl_seconds=60, clock=clock)
        renderer.sanitize_html("<p>hi</p>")

        # Act
        clock.now += 61
        renderer.sanitize_html("<p>hi</p>")

        # Assert
        assert sanitizer.calls == 2

    def test_nested_diagram_wrapper_survives(self):
        diagram = (
            '<div class="md-editor-mermaid" data-processed="true">'
            '<div class="wrapper"><svg viewBox="0 0 10 10"><g></g></svg></div>'
            '<button onclick="zoom()">zoom</button>'
            "</div>"
        )

        html = make_renderer().sanitize_html(
            f"<p>before</p>{diagram}<script>x()</script>"
        )

        assert diagram in html
        assert "<script" not in html

    @pytest.mark.asyncio
    async def test_loading_a_pack_empties_both_caches(self):
        # Arrange
        renderer = make_renderer(StaticEmojiPackSource(PACK))
        renderer.to_html("hello")
        renderer.sanitize_html("<p>hello</p>")

        # Act
        await renderer.load_emoji_pack(PACK_URL)

        # Assert
        assert len(renderer.html_cache) == 0
        assert len(renderer.sanitize_cache) == 0
