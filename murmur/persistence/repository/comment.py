"""PostgreSQL implementation of Comment repository."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from murmur.domain.error import NotFoundError
from murmur.domain.model import Comment
from murmur.domain.model.common import utc_now
from murmur.domain.repository import (
    CommentFilter,
    CommentInfoUpdate,
    CommentRepository,
    NewComment,
)
from murmur.domain.value import CommentId, CommentStatus
from murmur.persistence.mappers import new_comment_to_dict, row_to_comment
from murmur.persistence.tables import comments_table, users_table

_TEXT_FILTERS = ("nickname", "email", "ip_address", "content", "target_path")


def _select_comments():
    """Comments with the linked user's avatar."""
    return select(
        comments_table, users_table.c.avatar_url.label("user_avatar")
    ).select_from(
        comments_table.outerjoin(
            users_table, comments_table.c.user_id == users_table.c.id
        )
    )


class PostgresCommentRepository(CommentRepository):
    """PostgreSQL implementation of CommentRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def _fetch(self, stmt) -> List[Comment]:
        result = await self.session.execute(stmt)
        return [row_to_comment(dict(row)) for row in result.mappings().all()]

    async def _count(self, *conditions) -> int:
        stmt = select(func.count()).select_from(comments_table).where(*conditions)
        result = await self.session.execute(stmt)
        return result.scalar() or 0

    async def _update(self, comment_id: CommentId, **values: Any) -> Comment:
        stmt = (
            update(comments_table)
            .where(comments_table.c.id == comment_id)
            .values(**values)
            .returning(comments_table.c.id)
        )
        result = await self.session.execute(stmt)
        if result.fetchone() is None:
            raise NotFoundError("Comment", str(comment_id))
        await self.session.flush()
        updated = await self.find_by_id(comment_id)
        if updated is None:
            raise NotFoundError("Comment", str(comment_id))
        return updated

    async def create(self, new_comment: NewComment) -> Comment:
        """Insert a comment and return it with its assigned id."""
        stmt = (
            comments_table.insert()
            .values(**new_comment_to_dict(new_comment))
            .returning(comments_table.c.id)
        )
        result = await self.session.execute(stmt)
        comment_id = CommentId(result.scalar_one())
        await self.session.flush()
        created = await self.find_by_id(comment_id)
        if created is None:
            raise NotFoundError("Comment", str(comment_id))
        return created

    async def find_by_id(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID."""
        comments = await self._fetch(
            _select_comments().where(comments_table.c.id == comment_id)
        )
        return comments[0] if comments else None

    async def find_many_by_ids(self, comment_ids: list[CommentId]) -> list[Comment]:
        if not comment_ids:
            return []
        return await self._fetch(
            _select_comments()
            .where(comments_table.c.id.in_(comment_ids))
            .order_by(comments_table.c.id)
        )

    async def find_all_published_by_path(self, target_path: str) -> list[Comment]:
        """All published comments of one target path, oldest first."""
        return await self._fetch(
            _select_comments()
            .where(comments_table.c.target_path == target_path)
            .where(comments_table.c.status == int(CommentStatus.PUBLISHED))
            .order_by(comments_table.c.created_at, comments_table.c.id)
        )

    async def find_all_published_paginated(
        self, page: int, page_size: int
    ) -> tuple[list[Comment], int]:
        """Global published feed, newest first."""
        published = comments_table.c.status == int(CommentStatus.PUBLISHED)
        total = await self._count(published)
        comments = await self._fetch(
            _select_comments()
            .where(published)
            .order_by(desc(comments_table.c.created_at), desc(comments_table.c.id))
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        return comments, total

    async def find_with_conditions(
        self, conditions: CommentFilter
    ) -> tuple[list[Comment], int]:
        """Admin search, newest first. Text conditions are substring matches."""
        clauses = []
        for field in _TEXT_FILTERS:
            value = getattr(conditions, field)
            if value:
                clauses.append(comments_table.c[field].contains(value, autoescape=True))
        if conditions.status is not None:
            clauses.append(comments_table.c.status == int(conditions.status))

        total = await self._count(*clauses)
        comments = await self._fetch(
            _select_comments()
            .where(*clauses)
            .order_by(desc(comments_table.c.created_at), desc(comments_table.c.id))
            .limit(conditions.page_size)
            .offset((conditions.page - 1) * conditions.page_size)
        )
        return comments, total

    async def update_status(
        self, comment_id: CommentId, status: CommentStatus
    ) -> Comment:
        return await self._update(comment_id, status=int(status), updated_at=utc_now())

    async def set_pin(
        self, comment_id: CommentId, pinned_at: Optional[datetime]
    ) -> Comment:
        return await self._update(comment_id, pinned_at=pinned_at)

    async def increment_like_count(self, comment_id: CommentId) -> Comment:
        """Atomically increment likes by 1."""
        return await self._update(
            comment_id, like_count=comments_table.c.like_count + 1
        )

    async def decrement_like_count(self, comment_id: CommentId) -> Comment:
        """Atomically decrement likes by 1 (minimum 0)."""
        return await self._update(
            comment_id,
            like_count=func.greatest(comments_table.c.like_count - 1, 0),
        )

    async def update_content(
        self, comment_id: CommentId, content: str, content_html: str
    ) -> Comment:
        return await self._update(
            comment_id,
            content=content,
            content_html=content_html,
            updated_at=utc_now(),
        )

    async def update_info(
        self, comment_id: CommentId, changes: CommentInfoUpdate
    ) -> Comment:
        values: Dict[str, Any] = changes.model_dump(exclude_none=True)
        # An empty address clears the stored email
        if values.get("email") == "":
            values["email"] = None
        values["updated_at"] = utc_now()
        return await self._update(comment_id, **values)

    async def update_path(self, old_path: str, new_path: str) -> int:
        stmt = (
            update(comments_table)
            .where(comments_table.c.target_path == old_path)
            .values(target_path=new_path)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount or 0

    async def delete_by_ids(self, comment_ids: list[CommentId]) -> int:
        """Delete comments (hard delete)."""
        if not comment_ids:
            return 0
        stmt = comments_table.delete().where(comments_table.c.id.in_(comment_ids))
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount or 0
