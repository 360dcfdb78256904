"""HTML sanitization policy.

Comment HTML is reduced to a fixed allow-list of elements and attributes.
Everything else (scripts, event handlers, unknown tags, unlisted URL
schemes) is stripped. Diagram containers are protected before cleaning and
restored byte-for-byte afterwards.
"""

import threading

from bleach.css_sanitizer import CSSSanitizer
from bleach.sanitizer import Cleaner

from murmur.render.protect import extract_protected_blocks

# Internal object references, e.g. anzhiyu://file/<id>
INTERNAL_SCHEME = "anzhiyu"

ALLOWED_PROTOCOLS = frozenset({"http", "https", "mailto", INTERNAL_SCHEME})

# fmt: off
ALLOWED_TAGS = frozenset(
    {
        # Text
        "a", "abbr", "b", "blockquote", "br", "cite", "code", "del", "dfn",
        "em", "hr", "i", "ins", "kbd", "mark", "p", "pre", "q", "s", "samp",
        "small", "span", "strong", "sub", "sup", "u", "var", "div",
        "h1", "h2", "h3", "h4", "h5", "h6",
        # Lists
        "dd", "dl", "dt", "li", "ol", "ul",
        # Tables
        "caption", "col", "colgroup", "table", "tbody", "td", "tfoot", "th",
        "thead", "tr",
        # Media
        "audio", "figcaption", "figure", "img", "picture", "source", "track",
        "video", "iframe",
        # Collapsible sections
        "details", "summary",
        # Forms used by task lists
        "input", "label",
        # Math
        "math", "mfrac", "mi", "mn", "mo", "mrow", "msqrt", "msub", "msubsup",
        "msup", "mtable", "mtd", "mtext", "mtr", "semantics", "annotation",
        # Inline vector graphics
        "svg", "g", "path", "circle", "rect", "line", "polyline", "polygon",
        "text", "tspan", "defs", "use",
    }
)
# fmt: on

_GLOBAL_ATTRIBUTES = [
    "class",
    "id",
    "title",
    "lang",
    "dir",
    "style",
    "align",
    # Rich content blocks
    "data-type",
    "data-id",
    "data-src",
    "data-lang",
    "data-theme",
    "data-content",
]

ALLOWED_ATTRIBUTES = {
    "*": _GLOBAL_ATTRIBUTES,
    "a": ["href", "name", "target", "rel"],
    "img": ["src", "alt", "width", "height", "loading", "srcset", "sizes"],
    "audio": ["src", "controls", "loop", "muted", "preload"],
    "video": [
        "src",
        "controls",
        "loop",
        "muted",
        "preload",
        "poster",
        "width",
        "height",
    ],
    "source": ["src", "type", "srcset", "media"],
    "track": ["src", "kind", "srclang", "label", "default"],
    "iframe": ["src", "width", "height", "frameborder", "allow", "allowfullscreen"],
    "details": ["open"],
    "input": ["type", "checked", "disabled"],
    "ol": ["start", "reversed", "type"],
    "li": ["value"],
    "td": ["colspan", "rowspan"],
    "th": ["colspan", "rowspan", "scope"],
    "col": ["span"],
    "colgroup": ["span"],
    "blockquote": ["cite"],
    "q": ["cite"],
    "del": ["cite", "datetime"],
    "ins": ["cite", "datetime"],
    "math": ["display", "xmlns"],
    "annotation": ["encoding"],
    "svg": ["viewbox", "width", "height", "xmlns", "fill", "stroke"],
    "path": ["d", "fill", "stroke", "stroke-width"],
    "circle": ["cx", "cy", "r", "fill", "stroke"],
    "rect": ["x", "y", "width", "height", "rx", "ry", "fill", "stroke"],
    "line": ["x1", "y1", "x2", "y2", "stroke"],
    "polyline": ["points", "fill", "stroke"],
    "polygon": ["points", "fill", "stroke"],
    "text": ["x", "y", "fill"],
    "tspan": ["x", "y", "dx", "dy"],
    "g": ["fill", "stroke", "transform"],
    "use": ["href"],
}

ALLOWED_CSS_PROPERTIES = frozenset(
    {
        "color",
        "background-color",
        "font-weight",
        "font-style",
        "text-align",
        "text-decoration",
        "width",
        "height",
        "max-width",
        "vertical-align",
    }
)


class HtmlSanitizer:
    """Applies the comment allow-list policy to HTML fragments."""

    def __init__(self) -> None:
        self._cleaner = Cleaner(
            tags=ALLOWED_TAGS,
            attributes=ALLOWED_ATTRIBUTES,
            protocols=ALLOWED_PROTOCOLS,
            strip=True,
            strip_comments=True,
            css_sanitizer=CSSSanitizer(allowed_css_properties=ALLOWED_CSS_PROPERTIES),
        )
        # Cleaner keeps parser state between calls
        self._lock = threading.Lock()

    def clean(self, fragment: str) -> str:
        """Sanitize ``fragment`` without diagram protection."""
        with self._lock:
            return self._cleaner.clean(fragment)

    def sanitize(self, fragment: str) -> str:
        """Sanitize ``fragment``, keeping diagram containers verbatim."""
        protected, blocks = extract_protected_blocks(fragment)
        cleaned = self.clean(protected)
        if not blocks:
            return cleaned
        return blocks.restore(cleaned)
