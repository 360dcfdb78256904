"""Emoji shorthand substitution.

An emoji pack is a JSON object of named packs::

    {"bilibili": {"type": "image", "container": [
        {"icon": "<img src='https://cdn.example/wave.png'>", "text": "wave"}
    ]}}

Every ``:text:`` token in comment source is replaced by its icon markup
before Markdown conversion.
"""

import html
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping
from html.parser import HTMLParser
from typing import Any, Optional

import logfire

EMOJI_CSS_CLASS = "anzhiyu-owo-emotion"

_IMG_TAG = re.compile(r"<img\b[^>]*>", re.IGNORECASE)


class EmojiPackSource(ABC):
    """Where emoji pack JSON comes from."""

    @abstractmethod
    async def fetch(self, url: str) -> Mapping[str, Any]:
        """Fetch and decode the pack document at ``url``.

        Raises:
            ProviderError: If the document cannot be fetched or decoded
        """
        pass


class _FirstStartTag(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.attrs: Optional[list[tuple[str, Optional[str]]]] = None

    def handle_starttag(self, tag, attrs):
        if self.attrs is None:
            self.attrs = attrs


def annotate_icon(icon: str, css_class: str, alt: str) -> str:
    """Add ``css_class`` and set ``alt`` on the first ``<img>`` of ``icon``.

    Markup without an ``<img>`` is returned unchanged.
    """
    match = _IMG_TAG.search(icon)
    if match is None:
        return icon

    reader = _FirstStartTag()
    reader.feed(match.group(0))
    reader.close()

    attrs: list[tuple[str, Optional[str]]] = []
    has_class = False
    has_alt = False
    for name, value in reader.attrs or []:
        if name == "class":
            has_class = True
            classes = (value or "").split()
            if css_class not in classes:
                classes.append(css_class)
            value = " ".join(classes)
        elif name == "alt":
            has_alt = True
            value = alt
        attrs.append((name, value))
    if not has_class:
        attrs.append(("class", css_class))
    if not has_alt:
        attrs.append(("alt", alt))

    rendered = "".join(
        f" {name}" if value is None else f' {name}="{html.escape(value, quote=True)}"'
        for name, value in attrs
    )
    return f"{icon[: match.start()]}<img{rendered}>{icon[match.end() :]}"


class EmojiReplacer:
    """Immutable multi-token replacer.

    Instances are never modified; a configuration change builds a new one
    and the owner swaps its reference.
    """

    def __init__(self, replacements: Mapping[str, str]) -> None:
        self._replacements = dict(replacements)
        self._pattern: Optional[re.Pattern[str]] = None
        if self._replacements:
            tokens = sorted(self._replacements, key=len, reverse=True)
            self._pattern = re.compile("|".join(re.escape(t) for t in tokens))

    @classmethod
    def empty(cls) -> "EmojiReplacer":
        return cls({})

    @classmethod
    def from_pack(cls, packs: Mapping[str, Any]) -> "EmojiReplacer":
        """Build a replacer from a decoded emoji pack document."""
        replacements: dict[str, str] = {}
        for pack_name, pack in packs.items():
            if not isinstance(pack, Mapping):
                logfire.warn("Skipping malformed emoji pack", pack=pack_name)
                continue
            for emoji in pack.get("container") or []:
                if not isinstance(emoji, Mapping):
                    continue
                text = emoji.get("text")
                icon = emoji.get("icon")
                if not text or not isinstance(icon, str):
                    continue
                replacements[f":{text}:"] = annotate_icon(icon, EMOJI_CSS_CLASS, text)
        return cls(replacements)

    def replace(self, text: str) -> str:
        if self._pattern is None or ":" not in text:
            return text
        return self._pattern.sub(lambda m: self._replacements[m.group(0)], text)

    def __len__(self) -> int:
        return len(self._replacements)
