"""Comment domain service."""

import hashlib
import re
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

import logfire
from pydantic import BaseModel

from murmur.domain.error import NotFoundError, ValidationError
from murmur.domain.model import Comment, CommentAuthor
from murmur.domain.model.common import utc_now
from murmur.domain.repository import (
    CommentFilter,
    CommentInfoUpdate,
    CommentRepository,
    NewComment,
)
from murmur.domain.value import AuthClaims, CommentId, CommentStatus
from murmur.render.renderer import MarkdownRenderer

from .base import Service
from .moderation_service import ModerationService
from .notification_dispatcher import NotificationDispatcher
from .setting_service import SettingService
from .thread_builder import ThreadBuilder, ThreadItem, ThreadPage

UNKNOWN_LOCATION = "unknown"

CONTENT_MAX_LENGTH = 1000
NICKNAME_MIN_LENGTH = 2
NICKNAME_MAX_LENGTH = 50

_QQ_NUMBER_RE = re.compile(r"^[1-9]\d{4,10}$")
QQ_AVATAR_URL = "https://q.qlogo.cn/headimg_dl?dst_uin={qq}&spec=100"


def email_digest(email: Optional[str]) -> str:
    """MD5 hex digest of the lowercased address, empty for no address."""
    if not email:
        return ""
    return hashlib.md5(email.lower().encode("utf-8")).hexdigest()


class GeoIPService(ABC):
    """Resolves an IP address to a display location."""

    @abstractmethod
    async def lookup(self, ip: str, referer: str = "") -> str:
        pass


class QQProfile(BaseModel):
    """Public QQ profile used to prefill the comment form."""

    nickname: str
    avatar: str


class QQProfileClient(ABC):
    """Third-party QQ profile API."""

    @abstractmethod
    async def fetch_profile(
        self, api_url: str, api_key: str, qq_number: str, referer: str = ""
    ) -> QQProfile:
        """Look up a QQ account.

        Raises:
            ProviderError: If the API call fails or reports an error
        """
        pass


class CommentSubmission(BaseModel):
    """A visitor's comment as submitted, with reply targets already decoded."""

    target_path: str
    target_title: Optional[str] = None
    nickname: str
    email: Optional[str] = None
    website: Optional[str] = None
    content: str
    parent_id: Optional[CommentId] = None
    reply_to_id: Optional[CommentId] = None
    is_anonymous: bool = False


class CommentService(Service):
    """Domain service for comment operations."""

    def __init__(
        self,
        comment_repository: CommentRepository,
        moderation_service: ModerationService,
        thread_builder: ThreadBuilder,
        dispatcher: NotificationDispatcher,
        renderer: MarkdownRenderer,
        setting_service: SettingService,
        geo_service: Optional[GeoIPService] = None,
        qq_client: Optional[QQProfileClient] = None,
    ) -> None:
        """Initialize comment service.

        Args:
            comment_repository: Comment repository
            moderation_service: Submission checks
            thread_builder: Thread and preview assembly
            dispatcher: Notification fan-out
            renderer: Markdown renderer
            setting_service: Runtime settings
            geo_service: IP location lookup (locations stay unknown when None)
            qq_client: QQ profile API client
        """
        self.comment_repository = comment_repository
        self.moderation_service = moderation_service
        self.thread_builder = thread_builder
        self.dispatcher = dispatcher
        self.renderer = renderer
        self.setting_service = setting_service
        self.geo_service = geo_service
        self.qq_client = qq_client

    async def create(
        self,
        submission: CommentSubmission,
        ip: str,
        user_agent: str = "",
        referer: str = "",
        claims: Optional[AuthClaims] = None,
    ) -> ThreadItem:
        """Moderate, render and store a new comment.

        Notifications are queued when the comment is published.

        Args:
            submission: The submitted comment
            ip: Submitter's IP address
            user_agent: Submitter's user agent
            referer: Page the submission came from
            claims: Authenticated identity, if any

        Returns:
            The stored comment with its parent and reply target

        Raises:
            ValidationError: Invalid reply target
            PolicyRejectionError: Rejected by moderation
        """
        with logfire.span(
            "comment_service.create",
            target_path=submission.target_path,
            parent_id=submission.parent_id,
            ip=ip,
        ):
            decision = await self.moderation_service.review(
                target_path=submission.target_path,
                content=submission.content,
                email=submission.email,
                is_anonymous=submission.is_anonymous,
                ip=ip,
                claims=claims,
                parent_id=submission.parent_id,
                reply_to_id=submission.reply_to_id,
                referer=referer,
            )

            content_html = self.renderer.to_html(submission.content)
            location = await self.locate(ip, referer)

            comment = await self.comment_repository.create(
                NewComment(
                    target_path=submission.target_path,
                    target_title=submission.target_title,
                    user_id=decision.author_user.id if decision.author_user else None,
                    parent_id=decision.parent.id if decision.parent else None,
                    reply_to_id=decision.reply_to.id if decision.reply_to else None,
                    author=CommentAuthor(
                        nickname=submission.nickname,
                        email=submission.email,
                        website=submission.website,
                        ip_address=ip,
                        ip_location=location,
                        user_agent=user_agent,
                    ),
                    email_md5=email_digest(submission.email),
                    content=submission.content,
                    content_html=content_html,
                    status=decision.status,
                    is_admin_author=decision.is_admin_author,
                    is_anonymous=decision.is_anonymous,
                )
            )
            logfire.info(
                "Comment created",
                comment_id=comment.id,
                target_path=comment.target_path,
                status=comment.status.name,
            )

            if comment.is_published:
                self.dispatcher.dispatch(comment, decision.parent)

            return ThreadItem(
                comment=comment,
                parent=decision.parent,
                reply_to=decision.reply_to or decision.parent,
            )

    async def locate(self, ip: str, referer: str = "") -> str:
        """Display location of ``ip``; lookup failures give ``unknown``."""
        if not ip or self.geo_service is None:
            return UNKNOWN_LOCATION
        try:
            return await self.geo_service.lookup(ip, referer) or UNKNOWN_LOCATION
        except Exception as e:
            logfire.warn("IP location lookup failed", ip=ip, error=str(e))
            return UNKNOWN_LOCATION

    async def get_by_id(self, comment_id: CommentId) -> Comment:
        """Get a comment by ID.

        Raises:
            NotFoundError: If the comment does not exist
        """
        comment = await self.comment_repository.find_by_id(comment_id)
        if comment is None:
            logfire.warn("Comment not found", comment_id=comment_id)
            raise NotFoundError("Comment", str(comment_id))
        return comment

    async def list_by_path(
        self, target_path: str, page: int, page_size: int
    ) -> ThreadPage:
        """Top-level comments of a page, each with a reply preview."""
        with logfire.span(
            "comment_service.list_by_path", target_path=target_path, page=page
        ):
            comments = await self.comment_repository.find_all_published_by_path(
                target_path
            )
            result = self.thread_builder.build_page(comments, page, page_size)
            logfire.info(
                "Comments listed",
                target_path=target_path,
                roots=result.total,
                total=result.total_with_children,
            )
            return result

    async def list_children(
        self, parent_id: CommentId, page: int, page_size: int
    ) -> ThreadPage:
        """Replies below one comment (preview or full pagination).

        Raises:
            NotFoundError: If the parent comment does not exist
        """
        with logfire.span(
            "comment_service.list_children", parent_id=parent_id, page=page
        ):
            parent = await self.get_by_id(parent_id)
            comments = await self.comment_repository.find_all_published_by_path(
                parent.target_path
            )
            return self.thread_builder.build_children(
                comments, parent_id, page, page_size
            )

    async def list_latest(self, page: int, page_size: int) -> ThreadPage:
        """Site-wide published comments, newest first."""
        with logfire.span("comment_service.list_latest", page=page):
            comments, total = (
                await self.comment_repository.find_all_published_paginated(
                    page, page_size
                )
            )
            items = await self.with_companions(comments)
            return ThreadPage(
                items=items,
                total=total,
                total_with_children=total,
                page=page,
                page_size=page_size,
            )

    async def admin_list(self, conditions: CommentFilter) -> ThreadPage:
        """Filtered comment search for administrators."""
        with logfire.span(
            "comment_service.admin_list",
            page=conditions.page,
            status=conditions.status,
        ):
            comments, total = await self.comment_repository.find_with_conditions(
                conditions
            )
            return ThreadPage(
                items=[ThreadItem(comment=c) for c in comments],
                total=total,
                total_with_children=total,
                page=conditions.page,
                page_size=conditions.page_size,
            )

    async def with_companions(self, comments: list[Comment]) -> list[ThreadItem]:
        """Attach parents and reply targets, loaded in one batch."""
        wanted = {c.parent_id for c in comments if c.parent_id is not None}
        wanted |= {c.reply_to_id for c in comments if c.reply_to_id is not None}
        related: dict[CommentId, Comment] = {}
        if wanted:
            try:
                found = await self.comment_repository.find_many_by_ids(list(wanted))
                related = {c.id: c for c in found}
            except Exception as e:
                logfire.warn("Related comment lookup failed", error=str(e))

        items = []
        for c in comments:
            parent = related.get(c.parent_id) if c.parent_id else None
            target_id = c.reply_target_id
            reply_to = related.get(target_id) if target_id else None
            items.append(ThreadItem(comment=c, parent=parent, reply_to=reply_to))
        return items

    async def delete(self, comment_ids: list[CommentId]) -> int:
        """Hard delete comments. Replies are left in place.

        Raises:
            ValidationError: If no ids are given
        """
        if not comment_ids:
            raise ValidationError("At least one valid comment id is required")
        with logfire.span("comment_service.delete", count=len(comment_ids)):
            deleted = await self.comment_repository.delete_by_ids(comment_ids)
            logfire.info("Comments deleted", requested=len(comment_ids), deleted=deleted)
            return deleted

    async def update_status(self, comment_id: CommentId, status: int) -> Comment:
        """Publish or hold a comment.

        Raises:
            ValidationError: If ``status`` is not 1 (published) or 2 (pending)
        """
        try:
            new_status = CommentStatus(status)
        except ValueError:
            raise ValidationError(
                "Invalid status, must be 1 (published) or 2 (pending)"
            )
        with logfire.span(
            "comment_service.update_status",
            comment_id=comment_id,
            status=new_status.name,
        ):
            return await self.comment_repository.update_status(comment_id, new_status)

    async def set_pin(
        self, comment_id: CommentId, pinned: bool, now: Optional[datetime] = None
    ) -> Comment:
        with logfire.span(
            "comment_service.set_pin", comment_id=comment_id, pinned=pinned
        ):
            pinned_at = (now or utc_now()) if pinned else None
            return await self.comment_repository.set_pin(comment_id, pinned_at)

    async def like(self, comment_id: CommentId) -> int:
        updated = await self.comment_repository.increment_like_count(comment_id)
        logfire.info("Comment liked", comment_id=comment_id, likes=updated.like_count)
        return updated.like_count

    async def unlike(self, comment_id: CommentId) -> int:
        updated = await self.comment_repository.decrement_like_count(comment_id)
        logfire.info(
            "Comment unliked", comment_id=comment_id, likes=updated.like_count
        )
        return updated.like_count

    async def update_content(self, comment_id: CommentId, content: str) -> Comment:
        """Replace a comment's Markdown source and re-render it.

        Raises:
            ValidationError: If the content length is outside 1..1000
        """
        self._check_content(content)
        with logfire.span(
            "comment_service.update_content",
            comment_id=comment_id,
            content_length=len(content),
        ):
            content_html = self.renderer.to_html(content)
            return await self.comment_repository.update_content(
                comment_id, content, content_html
            )

    async def update_info(
        self,
        comment_id: CommentId,
        content: Optional[str] = None,
        nickname: Optional[str] = None,
        email: Optional[str] = None,
        website: Optional[str] = None,
    ) -> Comment:
        """Partially edit author fields and content. ``None`` leaves a field as is.

        An empty email clears both the address and its digest.

        Raises:
            ValidationError: If the content or nickname length is out of range
        """
        changes = CommentInfoUpdate()
        if content is not None:
            self._check_content(content)
            changes.content = content
            changes.content_html = self.renderer.to_html(content)

        if nickname is not None:
            nickname = nickname.strip()
            if not NICKNAME_MIN_LENGTH <= len(nickname) <= NICKNAME_MAX_LENGTH:
                raise ValidationError(
                    f"Nickname must be {NICKNAME_MIN_LENGTH}-{NICKNAME_MAX_LENGTH} "
                    "characters long"
                )
            changes.nickname = nickname

        if email is not None:
            email = email.strip()
            changes.email = email
            changes.email_md5 = email_digest(email)

        if website is not None:
            changes.website = website.strip()

        with logfire.span(
            "comment_service.update_info",
            comment_id=comment_id,
            fields=sorted(changes.model_dump(exclude_none=True)),
        ):
            return await self.comment_repository.update_info(comment_id, changes)

    async def update_path(self, old_path: str, new_path: str) -> int:
        """Move all comments of a renamed page or post.

        Raises:
            ValidationError: If either path is empty or both are equal
        """
        if not old_path or not new_path or old_path == new_path:
            raise ValidationError("Invalid old or new path")
        with logfire.span(
            "comment_service.update_path", old_path=old_path, new_path=new_path
        ):
            moved = await self.comment_repository.update_path(old_path, new_path)
            logfire.info("Comment path updated", old_path=old_path, moved=moved)
            return moved

    async def get_qq_info(self, qq_number: str, referer: str = "") -> QQProfile:
        """Nickname and avatar of a QQ account.

        Raises:
            ValidationError: Malformed QQ number, or the QQ API is not configured
            ProviderError: If the QQ API call fails
        """
        if not _QQ_NUMBER_RE.match(qq_number):
            raise ValidationError("Invalid QQ number")

        api_url = self.setting_service.get("comment.qq_api_url")
        api_key = self.setting_service.get("comment.qq_api_key")
        if not api_url or not api_key or self.qq_client is None:
            raise ValidationError("QQ profile lookup is not configured")

        with logfire.span("comment_service.get_qq_info", qq_number=qq_number):
            profile = await self.qq_client.fetch_profile(
                api_url, api_key, qq_number, referer
            )
            return QQProfile(
                nickname=profile.nickname,
                avatar=QQ_AVATAR_URL.format(qq=qq_number),
            )

    @staticmethod
    def _check_content(content: str) -> None:
        if not 1 <= len(content) <= CONTENT_MAX_LENGTH:
            raise ValidationError(
                f"Comment content must be 1-{CONTENT_MAX_LENGTH} characters long"
            )
