"""Unit tests for the in-memory comment repository."""

import pytest

from murmur.domain.repository import CommentFilter, CommentInfoUpdate
from murmur.domain.value import CommentId, CommentStatus, UserId
from murmur.persistence.repository.inmemory import (
    InMemoryCommentRepository,
    InMemoryUserRepository,
)
from tests.conftest import make_admin, make_new_comment


class TestInMemoryCommentRepository:
    """Unit tests for InMemoryCommentRepository."""

    @pytest.mark.asyncio
    async def test_published_by_path_is_oldest_first(self):
        # Arrange
        repo = InMemoryCommentRepository()
        later = await repo.create(make_new_comment(minutes=5))
        earlier = await repo.create(make_new_comment(minutes=1))
        await repo.create(make_new_comment(status=CommentStatus.PENDING, minutes=2))

        # Act
        comments = await repo.find_all_published_by_path("/posts/hello")

        # Assert
        assert [c.id for c in comments] == [earlier.id, later.id]

    @pytest.mark.asyncio
    async def test_conditions_match_substrings_and_status(self):
        # Arrange
        repo = InMemoryCommentRepository()
        await repo.create(make_new_comment(nickname="Alice", minutes=1))
        bob = await repo.create(make_new_comment(nickname="Bobby", minutes=2))
        await repo.create(
            make_new_comment(nickname="Bob", status=CommentStatus.PENDING, minutes=3)
        )

        # Act
        found, total = await repo.find_with_conditions(
            CommentFilter(nickname="Bob", status=CommentStatus.PUBLISHED)
        )

        # Assert
        assert [c.id for c in found] == [bob.id]
        assert total == 1

    @pytest.mark.asyncio
    async def test_linked_user_avatar_is_attached(self):
        # Arrange
        users = InMemoryUserRepository()
        admin = make_admin().model_copy(update={"avatar_url": "https://img/owner"})
        await users.save(admin)
        repo = InMemoryCommentRepository(users)
        created = await repo.create(
            make_new_comment().model_copy(update={"user_id": UserId(admin.id)})
        )

        # Act
        found = await repo.find_by_id(created.id)

        # Assert
        assert found.user_avatar == "https://img/owner"

    @pytest.mark.asyncio
    async def test_update_info_clears_email(self):
        repo = InMemoryCommentRepository()
        created = await repo.create(make_new_comment())

        updated = await repo.update_info(
            created.id, CommentInfoUpdate(email="", email_md5="")
        )

        assert updated.author.email is None
        assert updated.author.nickname == created.author.nickname

    @pytest.mark.asyncio
    async def test_delete_leaves_replies(self):
        # Arrange
        repo = InMemoryCommentRepository()
        root = await repo.create(make_new_comment())
        reply = await repo.create(make_new_comment(parent_id=root.id))

        # Act
        deleted = await repo.delete_by_ids([root.id, root.id, CommentId(99)])

        # Assert
        assert deleted == 1
        assert (await repo.find_by_id(reply.id)).parent_id == root.id
