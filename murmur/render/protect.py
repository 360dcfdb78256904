"""Protected blocks.

Diagram containers (elements whose class carries ``DIAGRAM_MARKER``) hold
SVG and wrapper markup that Markdown conversion and sanitization would
mangle. They are cut out before processing, replaced by opaque placeholder
tokens, and restored verbatim afterwards.

Blocks are located by walking the markup with an HTML parser and cut out
with a tag-balanced scan, so nested wrappers and sibling controls inside
the container survive. A plain regex is used only if the parser fails.
"""

import re
import uuid
from html.parser import HTMLParser

import logfire

DIAGRAM_MARKER = "md-editor-mermaid"
CONTAINER_TAGS = ("p", "div")

# Regex fallback: non-greedy, so it cannot handle nested containers
_BLOCK_RE = re.compile(
    r'<(?:p|div)[^>]*class="[^"]*md-editor-mermaid[^"]*"[^>]*>.*?</(?:p|div)>',
    re.DOTALL,
)


class ProtectedBlocks:
    """Placeholder token to original markup."""

    def __init__(self) -> None:
        self._blocks: dict[str, str] = {}

    def protect(self, markup: str) -> str:
        # Letters and digits only, so Markdown and the sanitizer leave it alone
        token = f"MERMAIDPLACEHOLDER{uuid.uuid4().hex}"
        self._blocks[token] = markup
        return token

    def restore(self, text: str) -> str:
        for token, markup in self._blocks.items():
            # Markdown wraps a standalone placeholder in a paragraph
            text = text.replace(f"<p>{token}</p>", markup)
            text = text.replace(token, markup)
        return text

    def __len__(self) -> int:
        return len(self._blocks)

    def __bool__(self) -> bool:
        return bool(self._blocks)


class _ContainerLocator(HTMLParser):
    """Collects (offset, tag) of every diagram container start tag."""

    def __init__(self, text: str) -> None:
        super().__init__(convert_charrefs=False)
        self.starts: list[tuple[int, str]] = []
        # getpos() reports (1-based line, column) counting "\n" only
        self._line_offsets = [0]
        for line in text.split("\n"):
            self._line_offsets.append(self._line_offsets[-1] + len(line) + 1)

    def handle_starttag(self, tag, attrs):
        if tag not in CONTAINER_TAGS:
            return
        for name, value in attrs:
            if name == "class" and value and DIAGRAM_MARKER in value:
                line, column = self.getpos()
                self.starts.append((self._line_offsets[line - 1] + column, tag))
                return


def _balanced_end(text: str, start: int, tag: str) -> int:
    """Index just past the tag closing the element opened at ``start``.

    Returns -1 if the element is never closed.
    """
    depth = 0
    tag_re = re.compile(rf"<(/?){tag}(?=[\s/>])[^>]*>", re.IGNORECASE)
    for match in tag_re.finditer(text, start):
        if match.group(1):
            depth -= 1
            if depth == 0:
                return match.end()
        else:
            depth += 1
    return -1


def _extract_balanced(text: str, blocks: ProtectedBlocks) -> str:
    locator = _ContainerLocator(text)
    locator.feed(text)
    locator.close()

    pieces: list[str] = []
    cursor = 0
    for start, tag in locator.starts:
        if start < cursor:
            # Nested inside a block already taken
            continue
        end = _balanced_end(text, start, tag)
        if end == -1:
            continue
        pieces.append(text[cursor:start])
        pieces.append(blocks.protect(text[start:end]))
        cursor = end
    pieces.append(text[cursor:])
    return "".join(pieces)


def _extract_regex(text: str, blocks: ProtectedBlocks) -> str:
    return _BLOCK_RE.sub(lambda m: blocks.protect(m.group(0)), text)


def extract_protected_blocks(text: str) -> tuple[str, ProtectedBlocks]:
    """Replace every diagram container in ``text`` with a placeholder.

    Returns:
        The text with placeholders, and the blocks needed to restore it
    """
    blocks = ProtectedBlocks()
    if DIAGRAM_MARKER not in text:
        return text, blocks
    try:
        return _extract_balanced(text, blocks), blocks
    except (AssertionError, ValueError) as e:
        logfire.warn("Diagram block scan failed, using regex fallback", error=str(e))
        blocks = ProtectedBlocks()
        return _extract_regex(text, blocks), blocks
