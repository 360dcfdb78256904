"""Comment repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from murmur.domain.model.comment import Comment, CommentAuthor
from murmur.domain.value import CommentId, CommentStatus, UserId


class NewComment(BaseModel):
    """Fields needed to insert a comment.

    ``created_at``/``updated_at`` are only set by imports that keep the
    original timestamps; otherwise storage assigns the current time.
    """

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
    like_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CommentFilter(BaseModel):
    """Admin search conditions. Text fields are substring matches."""

    page: int = 1
    page_size: int = 10
    nickname: Optional[str] = None
    email: Optional[str] = None
    ip_address: Optional[str] = None
    content: Optional[str] = None
    target_path: Optional[str] = None
    status: Optional[CommentStatus] = None


class CommentInfoUpdate(BaseModel):
    """Partial update of author/content fields. ``None`` means unchanged."""

    nickname: Optional[str] = None
    email: Optional[str] = None
    email_md5: Optional[str] = None
    website: Optional[str] = None
    content: Optional[str] = None
    content_html: Optional[str] = None


class CommentRepository(ABC):
    """Repository for Comment entity.

    Defines the contract for comment persistence operations.
    Implementations live in the infrastructure layer. Update operations
    raise ``NotFoundError`` when the comment does not exist.
    """

    @abstractmethod
    async def create(self, new_comment: NewComment) -> Comment:
        """Insert a comment and return it with its assigned id."""
        pass

    @abstractmethod
    async def find_by_id(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID.

        Args:
            comment_id: The comment's internal identifier

        Returns:
            The comment if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_many_by_ids(self, comment_ids: list[CommentId]) -> list[Comment]:
        """Find all comments whose id is in ``comment_ids``.

        Unknown ids are ignored.
        """
        pass

    @abstractmethod
    async def find_all_published_by_path(self, target_path: str) -> list[Comment]:
        """All published comments of one target path, oldest first."""
        pass

    @abstractmethod
    async def find_all_published_paginated(
        self, page: int, page_size: int
    ) -> tuple[list[Comment], int]:
        """Global published feed, newest first.

        Returns:
            The requested page and the total number of published comments
        """
        pass

    @abstractmethod
    async def find_with_conditions(
        self, conditions: CommentFilter
    ) -> tuple[list[Comment], int]:
        """Admin search, newest first.

        Returns:
            The requested page and the total number of matches
        """
        pass

    @abstractmethod
    async def update_status(
        self, comment_id: CommentId, status: CommentStatus
    ) -> Comment:
        pass

    @abstractmethod
    async def set_pin(
        self, comment_id: CommentId, pinned_at: Optional[datetime]
    ) -> Comment:
        """Pin at ``pinned_at``, or unpin when it is None."""
        pass

    @abstractmethod
    async def increment_like_count(self, comment_id: CommentId) -> Comment:
        pass

    @abstractmethod
    async def decrement_like_count(self, comment_id: CommentId) -> Comment:
        """Decrease the like counter, never below zero."""
        pass

    @abstractmethod
    async def update_content(
        self, comment_id: CommentId, content: str, content_html: str
    ) -> Comment:
        pass

    @abstractmethod
    async def update_info(
        self, comment_id: CommentId, changes: CommentInfoUpdate
    ) -> Comment:
        pass

    @abstractmethod
    async def update_path(self, old_path: str, new_path: str) -> int:
        """Move every comment of ``old_path`` to ``new_path``.

        Returns:
            Number of comments moved
        """
        pass

    @abstractmethod
    async def delete_by_ids(self, comment_ids: list[CommentId]) -> int:
        """Hard delete. Children are left in place.

        Returns:
            Number of comments deleted
        """
        pass
