"""Test configuration and helpers."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import logfire

from murmur.config import AuthSettings
from murmur.domain.model import Comment, CommentAuthor, User
from murmur.domain.repository import NewComment
from murmur.domain.value import CommentId, CommentStatus, UserId
from murmur.util.ids import EntityType, IdCodec
from murmur.util.jwt import create_token

# Spans and logs stay in-process during tests
logfire.configure(send_to_logfire=False, console=False)

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_comment(
    comment_id: int,
    *,
    parent_id: Optional[int] = None,
    reply_to_id: Optional[int] = None,
    minutes: int = 0,
    target_path: str = "/posts/hello",
    nickname: Optional[str] = None,
    email: Optional[str] = None,
    content: str = "Hello",
    status: CommentStatus = CommentStatus.PUBLISHED,
    is_admin_author: bool = False,
    is_anonymous: bool = False,
    user_id: Optional[int] = None,
    pinned_at: Optional[datetime] = None,
) -> Comment:
    """Build a comment created ``minutes`` after a fixed base time."""
    created_at = BASE_TIME + timedelta(minutes=minutes)
    return Comment(
        id=CommentId(comment_id),
        target_path=target_path,
        parent_id=CommentId(parent_id) if parent_id else None,
        reply_to_id=CommentId(reply_to_id) if reply_to_id else None,
        user_id=UserId(user_id) if user_id else None,
        author=CommentAuthor(
            nickname=nickname or f"user{comment_id}",
            email=email,
            ip_address="203.0.113.7",
        ),
        content=content,
        status=status,
        is_admin_author=is_admin_author,
        is_anonymous=is_anonymous,
        pinned_at=pinned_at,
        created_at=created_at,
        updated_at=created_at,
    )


def make_new_comment(
    *,
    target_path: str = "/posts/hello",
    nickname: str = "Alice",
    email: Optional[str] = "alice@example.com",
    content: str = "Hello",
    parent_id: Optional[int] = None,
    reply_to_id: Optional[int] = None,
    is_anonymous: bool = False,
    is_admin_author: bool = False,
    status: CommentStatus = CommentStatus.PUBLISHED,
    minutes: Optional[int] = None,
) -> NewComment:
    """Build a repository insert; ``minutes`` pins the creation time."""
    created_at = BASE_TIME + timedelta(minutes=minutes) if minutes is not None else None
    return NewComment(
        target_path=target_path,
        parent_id=CommentId(parent_id) if parent_id else None,
        reply_to_id=CommentId(reply_to_id) if reply_to_id else None,
        author=CommentAuthor(nickname=nickname, email=email, ip_address="203.0.113.7"),
        content=content,
        content_html=f"<p>{content}</p>",
        status=status,
        is_admin_author=is_admin_author,
        is_anonymous=is_anonymous,
        created_at=created_at,
        updated_at=created_at,
    )


def make_admin(user_id: int = 1, email: str = "owner@example.com") -> User:
    return User(id=UserId(user_id), nickname="Owner", email=email, group_id=1)


def sign_in_token(user_id: int) -> str:
    """Bearer token for ``user_id``, signed with the default test settings."""
    public_id = IdCodec().encode(user_id, EntityType.USER)
    return create_token(public_id, AuthSettings())
