"""Turns thread items into API responses."""

import re
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional

import logfire

from murmur.domain.model import Comment
from murmur.domain.service import SettingService, ThreadItem, ThreadPage
from murmur.render.renderer import MarkdownRenderer
from murmur.util.ids import IdCodec

from .common import (
    AdminCommentListResponse,
    AdminCommentResponse,
    CommentListResponse,
    CommentResponse,
)

FILE_URL_EXPIRY = timedelta(hours=1)

_FILE_REF_RE = re.compile(r'src="anzhiyu://file/([a-zA-Z0-9_-]+)"')
_QQ_EMAIL_RE = re.compile(r"^([1-9]\d{4,10})@qq\.com$")


class FileService(ABC):
    """Resolves internal file references to downloadable URLs."""

    @abstractmethod
    async def get_download_url(self, public_file_id: str, expires_in: timedelta) -> str:
        """Signed URL for a stored file, valid for ``expires_in``."""
        pass


def qq_number_of(email: Optional[str]) -> Optional[str]:
    """QQ number of a ``<number>@qq.com`` address."""
    if not email:
        return None
    match = _QQ_EMAIL_RE.match(email.strip().lower())
    return match.group(1) if match else None


class CommentPresenter:
    """Builds visitor and administrator views of comments."""

    def __init__(
        self,
        id_codec: IdCodec,
        renderer: MarkdownRenderer,
        setting_service: SettingService,
        file_service: Optional[FileService] = None,
    ) -> None:
        self.id_codec = id_codec
        self.renderer = renderer
        self.setting_service = setting_service
        self.file_service = file_service

    def _encode(self, comment_id) -> Optional[str]:
        return self.id_codec.encode_comment(comment_id) if comment_id else None

    async def resolve_file_refs(self, html: str) -> str:
        """Replace internal file references with signed download URLs.

        References that cannot be resolved get an empty ``src``.
        """
        file_ids = list(dict.fromkeys(_FILE_REF_RE.findall(html)))
        if not file_ids:
            return html

        urls: dict[str, str] = {}
        for file_id in file_ids:
            if self.file_service is None:
                urls[file_id] = ""
                continue
            try:
                urls[file_id] = await self.file_service.get_download_url(
                    file_id, FILE_URL_EXPIRY
                )
            except Exception as e:
                logfire.warn("File reference unresolved", file_id=file_id, error=str(e))
                urls[file_id] = ""

        return _FILE_REF_RE.sub(lambda m: f'src="{urls[m.group(1)]}"', html)

    async def _fields(self, item: ThreadItem) -> dict:
        comment: Comment = item.comment
        show_ua = self.setting_service.get_bool("comment.show_ua")
        show_region = self.setting_service.get_bool("comment.show_region")

        content_html = await self.resolve_file_refs(
            self.renderer.to_html(comment.content)
        )
        return dict(
            id=self.id_codec.encode_comment(comment.id),
            created_at=comment.created_at,
            pinned_at=comment.pinned_at,
            nickname=comment.author.nickname,
            email_md5=comment.email_md5,
            qq_number=qq_number_of(comment.author.email),
            avatar_url=comment.user_avatar,
            website=comment.author.website,
            content_html=content_html,
            is_admin_comment=comment.is_admin_author,
            is_anonymous=comment.is_anonymous,
            ip_location=comment.author.ip_location if show_region else None,
            user_agent=comment.author.user_agent if show_ua else None,
            target_path=comment.target_path,
            target_title=comment.target_title,
            parent_id=self._encode(comment.parent_id),
            reply_to_id=self._encode(comment.reply_target_id),
            reply_to_nick=item.reply_to.author.nickname if item.reply_to else None,
            like_count=comment.like_count,
            total_children=item.total_children,
        )

    async def present(self, item: ThreadItem) -> CommentResponse:
        fields = await self._fields(item)
        children = [await self.present(child) for child in item.children]
        return CommentResponse(**fields, children=children)

    async def present_admin(self, item: ThreadItem) -> AdminCommentResponse:
        comment = item.comment
        fields = await self._fields(item)
        return AdminCommentResponse(
            **fields,
            email=comment.author.email,
            ip_address=comment.author.ip_address,
            content=comment.content,
            status=int(comment.status),
        )

    async def present_page(self, page: ThreadPage) -> CommentListResponse:
        return CommentListResponse(
            items=[await self.present(item) for item in page.items],
            total=page.total,
            total_with_children=page.total_with_children,
            page=page.page,
            page_size=page.page_size,
        )

    async def present_admin_page(self, page: ThreadPage) -> AdminCommentListResponse:
        return AdminCommentListResponse(
            items=[await self.present_admin(item) for item in page.items],
            total=page.total,
            page=page.page,
            page_size=page.page_size,
        )
