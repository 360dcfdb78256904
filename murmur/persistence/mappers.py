"""Mappers for converting between database rows and domain models.

Domain models are immutable pydantic models, so rows are mapped by hand
rather than through SQLAlchemy's ORM mapping.
"""

from typing import Any, Dict

from murmur.domain.model import Comment, CommentAuthor, NotificationPreference, User
from murmur.domain.repository import NewComment
from murmur.domain.value import CommentId, CommentStatus, UserId


def _optional_comment_id(value: Any) -> CommentId | None:
    return CommentId(value) if value is not None else None


def row_to_comment(row: Dict[str, Any]) -> Comment:
    """Convert a comments row (optionally joined with the user avatar).

    Args:
        row: Database row as dict

    Returns:
        Comment domain model
    """
    return Comment(
        id=CommentId(row["id"]),
        target_path=row["target_path"],
        target_title=row.get("target_title"),
        user_id=UserId(row["user_id"]) if row.get("user_id") is not None else None,
        parent_id=_optional_comment_id(row.get("parent_id")),
        reply_to_id=_optional_comment_id(row.get("reply_to_id")),
        author=CommentAuthor(
            nickname=row["nickname"],
            email=row.get("email"),
            website=row.get("website"),
            ip_address=row.get("ip_address") or "",
            ip_location=row.get("ip_location") or "",
            user_agent=row.get("user_agent") or "",
        ),
        email_md5=row.get("email_md5") or "",
        content=row["content"],
        content_html=row.get("content_html") or "",
        status=CommentStatus(row["status"]),
        is_admin_author=row["is_admin_comment"],
        is_anonymous=row["is_anonymous"],
        like_count=row["like_count"],
        pinned_at=row.get("pinned_at"),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        user_avatar=row.get("user_avatar"),
    )


def new_comment_to_dict(new_comment: NewComment) -> Dict[str, Any]:
    """Convert a NewComment to insert values.

    Timestamps are left to the database default unless the caller set them.
    """
    values: Dict[str, Any] = {
        "target_path": new_comment.target_path,
        "target_title": new_comment.target_title,
        "user_id": new_comment.user_id,
        "parent_id": new_comment.parent_id,
        "reply_to_id": new_comment.reply_to_id,
        "nickname": new_comment.author.nickname,
        "email": new_comment.author.email,
        "email_md5": new_comment.email_md5,
        "website": new_comment.author.website,
        "ip_address": new_comment.author.ip_address,
        "ip_location": new_comment.author.ip_location,
        "user_agent": new_comment.author.user_agent,
        "content": new_comment.content,
        "content_html": new_comment.content_html,
        "status": int(new_comment.status),
        "is_admin_comment": new_comment.is_admin_author,
        "is_anonymous": new_comment.is_anonymous,
        "like_count": new_comment.like_count,
    }
    if new_comment.created_at is not None:
        values["created_at"] = new_comment.created_at
    if new_comment.updated_at is not None:
        values["updated_at"] = new_comment.updated_at
    return values


def row_to_user(row: Dict[str, Any]) -> User:
    return User(
        id=UserId(row["id"]),
        nickname=row["nickname"],
        email=row.get("email"),
        avatar_url=row.get("avatar_url"),
        group_id=row["group_id"],
        created_at=row["created_at"],
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    return user.model_dump()


def row_to_notification_preference(row: Dict[str, Any]) -> NotificationPreference:
    return NotificationPreference(
        user_id=UserId(row["user_id"]),
        allow_comment_reply_notification=row["allow_comment_reply_notification"],
    )
