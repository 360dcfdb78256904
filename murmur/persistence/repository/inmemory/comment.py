"""In-memory comment repository for testing."""

import itertools
from datetime import datetime
from typing import Optional

from murmur.domain.error import NotFoundError
from murmur.domain.model.comment import Comment
from murmur.domain.model.common import utc_now
from murmur.domain.repository.comment import (
    CommentFilter,
    CommentInfoUpdate,
    CommentRepository,
    NewComment,
)
from murmur.domain.repository.user import UserRepository
from murmur.domain.value import CommentId, CommentStatus

_TEXT_FILTERS = ("nickname", "email", "ip_address", "content", "target_path")


def _newest_first(comments: list[Comment]) -> list[Comment]:
    return sorted(comments, key=lambda c: (c.created_at, c.id), reverse=True)


class InMemoryCommentRepository(CommentRepository):
    """In-memory implementation of CommentRepository for testing.

    When given a user repository, loaded comments carry the linked user's
    avatar the way the SQL join does.
    """

    def __init__(self, user_repository: Optional[UserRepository] = None) -> None:
        self._comments: dict[CommentId, Comment] = {}
        self._ids = itertools.count(1)
        self.user_repository = user_repository

    async def _load(self, comment: Comment) -> Comment:
        if comment.user_id is None or self.user_repository is None:
            return comment
        user = await self.user_repository.find_by_id(comment.user_id)
        avatar = user.avatar_url if user else None
        return comment.model_copy(update={"user_avatar": avatar})

    async def _load_all(self, comments: list[Comment]) -> list[Comment]:
        return [await self._load(c) for c in comments]

    def _get(self, comment_id: CommentId) -> Comment:
        comment = self._comments.get(comment_id)
        if comment is None:
            raise NotFoundError("Comment", str(comment_id))
        return comment

    async def _replace(self, comment_id: CommentId, **changes) -> Comment:
        updated = self._get(comment_id).model_copy(update=changes)
        self._comments[comment_id] = updated
        return await self._load(updated)

    async def create(self, new_comment: NewComment) -> Comment:
        """Insert a comment with the next sequential id."""
        now = utc_now()
        fields = new_comment.model_dump(exclude={"author", "created_at", "updated_at"})
        comment = Comment(
            id=CommentId(next(self._ids)),
            author=new_comment.author,
            created_at=new_comment.created_at or now,
            updated_at=new_comment.updated_at or now,
            **fields,
        )
        self._comments[comment.id] = comment
        return await self._load(comment)

    async def find_by_id(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID."""
        comment = self._comments.get(comment_id)
        return await self._load(comment) if comment else None

    async def find_many_by_ids(self, comment_ids: list[CommentId]) -> list[Comment]:
        wanted = set(comment_ids)
        found = [c for cid, c in sorted(self._comments.items()) if cid in wanted]
        return await self._load_all(found)

    async def find_all_published_by_path(self, target_path: str) -> list[Comment]:
        comments = [
            c
            for c in self._comments.values()
            if c.target_path == target_path and c.is_published
        ]
        comments.sort(key=lambda c: (c.created_at, c.id))
        return await self._load_all(comments)

    async def find_all_published_paginated(
        self, page: int, page_size: int
    ) -> tuple[list[Comment], int]:
        published = _newest_first(
            [c for c in self._comments.values() if c.is_published]
        )
        start = (page - 1) * page_size
        return await self._load_all(published[start : start + page_size]), len(
            published
        )

    async def find_with_conditions(
        self, conditions: CommentFilter
    ) -> tuple[list[Comment], int]:
        def matches(comment: Comment) -> bool:
            values = {
                "nickname": comment.author.nickname,
                "email": comment.author.email or "",
                "ip_address": comment.author.ip_address,
                "content": comment.content,
                "target_path": comment.target_path,
            }
            for field in _TEXT_FILTERS:
                wanted = getattr(conditions, field)
                if wanted and wanted not in values[field]:
                    return False
            if conditions.status is not None and comment.status != conditions.status:
                return False
            return True

        found = _newest_first([c for c in self._comments.values() if matches(c)])
        start = (conditions.page - 1) * conditions.page_size
        page = found[start : start + conditions.page_size]
        return await self._load_all(page), len(found)

    async def update_status(
        self, comment_id: CommentId, status: CommentStatus
    ) -> Comment:
        return await self._replace(comment_id, status=status, updated_at=utc_now())

    async def set_pin(
        self, comment_id: CommentId, pinned_at: Optional[datetime]
    ) -> Comment:
        return await self._replace(comment_id, pinned_at=pinned_at)

    async def increment_like_count(self, comment_id: CommentId) -> Comment:
        likes = self._get(comment_id).like_count
        return await self._replace(comment_id, like_count=likes + 1)

    async def decrement_like_count(self, comment_id: CommentId) -> Comment:
        likes = self._get(comment_id).like_count
        return await self._replace(comment_id, like_count=max(likes - 1, 0))

    async def update_content(
        self, comment_id: CommentId, content: str, content_html: str
    ) -> Comment:
        return await self._replace(
            comment_id,
            content=content,
            content_html=content_html,
            updated_at=utc_now(),
        )

    async def update_info(
        self, comment_id: CommentId, changes: CommentInfoUpdate
    ) -> Comment:
        comment = self._get(comment_id)
        values = changes.model_dump(exclude_none=True)

        author_changes = {
            key: values.pop(key)
            for key in ("nickname", "email", "website")
            if key in values
        }
        if author_changes.get("email") == "":
            author_changes["email"] = None
        author = comment.author.model_copy(update=author_changes)

        return await self._replace(
            comment_id, author=author, updated_at=utc_now(), **values
        )

    async def update_path(self, old_path: str, new_path: str) -> int:
        moved = [c for c in self._comments.values() if c.target_path == old_path]
        for comment in moved:
            self._comments[comment.id] = comment.model_copy(
                update={"target_path": new_path}
            )
        return len(moved)

    async def delete_by_ids(self, comment_ids: list[CommentId]) -> int:
        deleted = 0
        for comment_id in set(comment_ids):
            if self._comments.pop(comment_id, None) is not None:
                deleted += 1
        return deleted
