"""Unit tests for diagram block protection and sanitizing."""

from murmur.render.protect import extract_protected_blocks
from murmur.render.sanitizer import HtmlSanitizer

DIAGRAM = (
    '<div class="md-editor-mermaid" data-processed="true">'
    '<div class="wrapper"><svg viewBox="0 0 10 10"><g></g></svg></div>'
    '<button onclick="zoom()">zoom</button>'
    "</div>"
)


class TestExtractProtectedBlocks:
    """Tests for extract_protected_blocks."""

    def test_text_without_diagrams_is_untouched(self):
        text, blocks = extract_protected_blocks("<p>plain</p>")

        assert text == "<p>plain</p>"
        assert not blocks

    def test_nested_container_is_cut_out_whole(self):
        # Act
        text, blocks = extract_protected_blocks(f"<p>before</p>{DIAGRAM}<p>after</p>")

        # Assert
        assert len(blocks) == 1
        assert "md-editor-mermaid" not in text
        assert text.startswith("<p>before</p>")
        assert text.endswith("<p>after</p>")
        assert blocks.restore(text) == f"<p>before</p>{DIAGRAM}<p>after</p>"

    def test_multiple_blocks_restore_in_place(self):
        source = f"{DIAGRAM}\n<p>middle</p>\n{DIAGRAM}"

        text, blocks = extract_protected_blocks(source)

        assert len(blocks) == 2
        assert blocks.restore(text) == source

    def test_unclosed_container_is_left_alone(self):
        source = '<div class="md-editor-mermaid"><svg></svg>'

        text, blocks = extract_protected_blocks(source)

        assert not blocks
        assert text == source


class TestHtmlSanitizer:
    """Tests for HtmlSanitizer."""

    def test_script_and_event_handlers_are_removed(self):
        sanitizer = HtmlSanitizer()

        cleaned = sanitizer.sanitize(
            '<p onclick="steal()">hi</p><script>alert(1)</script>'
        )

        assert "<script" not in cleaned
        assert "onclick" not in cleaned
        assert "<p>hi</p>" in cleaned

    def test_javascript_links_lose_their_href(self):
        cleaned = HtmlSanitizer().sanitize('<a href="javascript:alert(1)">x</a>')

        assert "javascript:" not in cleaned

    def test_internal_file_scheme_is_allowed(self):
        cleaned = HtmlSanitizer().sanitize('<img src="anzhiyu://file/abc123">')

        assert 'src="anzhiyu://file/abc123"' in cleaned

    def test_diagram_blocks_survive_sanitizing(self):
        cleaned = HtmlSanitizer().sanitize(f"{DIAGRAM}<script>bad()</script>")

        assert DIAGRAM in cleaned
        assert "<script" not in cleaned
