"""Emoji pack download."""

from collections.abc import Mapping
from typing import Any

import httpx
import logfire

from murmur.adapter.error import ProviderError
from murmur.render.emoji import EmojiPackSource


class HttpEmojiPackSource(EmojiPackSource):
    """Fetches emoji pack JSON from a CDN."""

    def __init__(
        self,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, url: str) -> Mapping[str, Any]:
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.get(
                    url, timeout=self.timeout, follow_redirects=True
                )
        except httpx.HTTPError as e:
            logfire.error("Emoji pack HTTP error", url=url, error=str(e))
            raise ProviderError(f"HTTP error fetching emoji pack: {e}")

        if response.status_code != 200:
            logfire.error(
                "Emoji pack request failed", url=url, status_code=response.status_code
            )
            raise ProviderError(f"Emoji pack request returned {response.status_code}")

        try:
            packs = response.json()
        except ValueError:
            raise ProviderError("Emoji pack is not valid JSON")
        if not isinstance(packs, dict):
            raise ProviderError("Emoji pack must be a JSON object")
        return packs
