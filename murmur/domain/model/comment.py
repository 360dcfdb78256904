"""Comment entity.

Comments attach to a target path (a post or page) and form threads through
two pointers:

- ``parent_id``: the structural parent, i.e. the comment actually replied to
  at submission time. Following parents always ends at a top-level comment.
- ``reply_to_id``: the conversational target used for display ("replying to
  <nick>"). Deep threads are flattened under their top-level root, so this
  may differ from the parent.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from murmur.domain.model.common import DomainModel, utc_now
from murmur.domain.value import CommentId, CommentStatus, UserId


class CommentAuthor(DomainModel):
    """Who wrote a comment and from where."""

    nickname: str
    email: Optional[str] = None
    website: Optional[str] = None
    ip_address: str = ""
    ip_location: str = ""
    user_agent: str = ""


class Comment(DomainModel):
    """Comment entity."""

    id: CommentId
    target_path: str
    target_title: Optional[str] = None
    user_id: Optional[UserId] = None
    parent_id: Optional[CommentId] = None
    reply_to_id: Optional[CommentId] = None
    author: CommentAuthor
    email_md5: str = ""
    content: str
    content_html: str = ""
    status: CommentStatus = CommentStatus.PUBLISHED
    is_admin_author: bool = False
    is_anonymous: bool = False
    like_count: int = Field(default=0, ge=0)
    pinned_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    # Avatar of the linked user account, loaded alongside the comment
    user_avatar: Optional[str] = None

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None

    @property
    def is_published(self) -> bool:
        return self.status == CommentStatus.PUBLISHED

    @property
    def reply_target_id(self) -> Optional[CommentId]:
        """Conversational reply target.

        Records written before ``reply_to_id`` existed only carry
        ``parent_id``; for those the parent is the reply target. This
        fallback applies to display only and never changes stored data.
        """
        if self.reply_to_id is not None:
            return self.reply_to_id
        return self.parent_id
