"""Instant push to the site owner's device.

Two channels are supported, chosen by the ``pushoo.channel`` setting:

- ``bark``: POST ``{title, body, group, url}`` as JSON to the device URL
- ``webhook``: POST ``{title, content, comment}`` as JSON to any endpoint

The ``pushoo.url`` setting may contain ``{{TITLE}}`` and ``{{CONTENT}}``
placeholders, which are replaced by the URL-encoded message parts.
"""

from typing import Any, Optional
from urllib.parse import quote

import httpx
import logfire

from murmur.adapter.error import ProviderError
from murmur.domain.model import Comment
from murmur.domain.service.notification_dispatcher import PushooService
from murmur.domain.service.setting_service import SettingService

BARK_GROUP = "comments"
CONTENT_PREVIEW_CHARS = 200

SUPPORTED_CHANNELS = ("bark", "webhook")


def build_message(comment: Comment, parent: Optional[Comment]) -> tuple[str, str]:
    """Title and body text for a push notice."""
    page = comment.target_title or comment.target_path
    if parent is None:
        title = f"New comment on {page}"
    else:
        title = f"{comment.author.nickname} replied to {parent.author.nickname}"
    body = f"{comment.author.nickname}: {comment.content[:CONTENT_PREVIEW_CHARS]}"
    return title, body


def expand_url(template: str, title: str, body: str) -> str:
    return template.replace("{{TITLE}}", quote(title, safe="")).replace(
        "{{CONTENT}}", quote(body, safe="")
    )


class HttpPushooService(PushooService):
    """Sends push notices over HTTP using the current push settings."""

    def __init__(
        self,
        setting_service: SettingService,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize push client.

        Args:
            setting_service: Source of ``pushoo.channel`` and ``pushoo.url``
            timeout: Request timeout in seconds
            transport: Optional transport (tests pass ``httpx.MockTransport``)
        """
        self.setting_service = setting_service
        self.timeout = timeout
        self.transport = transport

    async def send_comment_notification(
        self, comment: Comment, parent: Optional[Comment] = None
    ) -> None:
        """Push a notice about ``comment``.

        Raises:
            ProviderError: Unknown channel, missing URL, or a failed request
        """
        channel = self.setting_service.get("pushoo.channel").strip().lower()
        url_template = self.setting_service.get("pushoo.url").strip()
        if channel not in SUPPORTED_CHANNELS:
            raise ProviderError(f"Unsupported push channel: {channel!r}")
        if not url_template:
            raise ProviderError("Push URL is not configured")

        title, body = build_message(comment, parent)
        url = expand_url(url_template, title, body)

        payload: dict[str, Any]
        if channel == "bark":
            payload = {
                "title": title,
                "body": body,
                "group": BARK_GROUP,
                "url": comment.target_path,
            }
        else:
            payload = {
                "title": title,
                "content": body,
                "comment": {
                    "target_path": comment.target_path,
                    "target_title": comment.target_title or "",
                    "nickname": comment.author.nickname,
                    "content": comment.content,
                    "is_reply": parent is not None,
                },
            }

        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.post(url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            logfire.error("Push HTTP error", channel=channel, error=str(e))
            raise ProviderError(f"HTTP error sending push: {e}")

        if response.status_code >= 300:
            logfire.error(
                "Push request failed",
                channel=channel,
                status_code=response.status_code,
                error=response.text,
            )
            raise ProviderError(f"Push endpoint returned {response.status_code}")

        logfire.debug("Push delivered", channel=channel, comment_id=comment.id)
