"""Domain model entities for murmur."""

from murmur.domain.model.comment import Comment, CommentAuthor
from murmur.domain.model.transfer import (
    ExportBundle,
    ExportCommentItem,
    ImportOptions,
    ImportResult,
)
from murmur.domain.model.user import NotificationPreference, User

__all__ = [
    "Comment",
    "CommentAuthor",
    "ExportBundle",
    "ExportCommentItem",
    "ImportOptions",
    "ImportResult",
    "NotificationPreference",
    "User",
]
