"""Unit tests for CommentService."""

import pytest

from murmur.domain.error import NotFoundError, ValidationError
from murmur.domain.repository import CommentRepository
from murmur.domain.service import (
    CommentService,
    CommentSubmission,
    PushooService,
    QQProfileClient,
    SettingService,
)
from murmur.domain.service.comment_service import email_digest
from murmur.domain.value import CommentId, CommentStatus
from murmur.util.worker import WorkerPool
from tests.conftest import make_new_comment
from tests.harness import create_env_fixture

unit_env = create_env_fixture()

PATH = "/posts/hello"


def submission(**overrides) -> CommentSubmission:
    fields = dict(
        target_path=PATH,
        target_title="Hello",
        nickname="Alice",
        email="Alice@Example.com",
        content="Nice **post**",
    )
    fields.update(overrides)
    return CommentSubmission(**fields)


async def create(service: CommentService, ip: str = "198.51.100.1", **overrides):
    return await service.create(submission(**overrides), ip=ip, user_agent="pytest")


class TestCreate:
    """Tests for CommentService.create."""

    @pytest.mark.asyncio
    async def test_stores_rendered_published_comment(self, unit_env):
        # Arrange
        service = await unit_env.get(CommentService)

        # Act
        item = await create(service)

        # Assert
        comment = item.comment
        assert comment.status == CommentStatus.PUBLISHED
        assert "<strong>post</strong>" in comment.content_html
        assert comment.email_md5 == email_digest("alice@example.com")
        assert comment.author.ip_location == "unknown"
        assert comment.author.user_agent == "pytest"
        assert item.parent is None

    @pytest.mark.asyncio
    async def test_reply_carries_parent_and_reply_target(self, unit_env):
        # Arrange
        service = await unit_env.get(CommentService)
        root = await create(service)

        # Act
        reply = await create(
            service, ip="198.51.100.2", parent_id=root.comment.id, content="Agreed"
        )

        # Assert
        assert reply.comment.parent_id == root.comment.id
        assert reply.parent.id == root.comment.id
        assert reply.reply_to.id == root.comment.id

    @pytest.mark.asyncio
    async def test_published_comment_is_pushed(self, unit_env):
        # Arrange
        settings = await unit_env.get(SettingService)
        settings.update({"pushoo.channel": "bark"})
        service = await unit_env.get(CommentService)

        # Act
        item = await create(service)
        await (await unit_env.get(WorkerPool)).join()

        # Assert
        pushoo = await unit_env.get(PushooService)
        assert [(c.id, p) for c, p in pushoo.sent] == [(item.comment.id, None)]

    @pytest.mark.asyncio
    async def test_held_comment_is_not_pushed(self, unit_env):
        # Arrange
        settings = await unit_env.get(SettingService)
        settings.update(
            {"pushoo.channel": "bark", "comment.forbidden_words": "casino"}
        )
        service = await unit_env.get(CommentService)

        # Act
        item = await create(service, content="Best casino in town")
        await (await unit_env.get(WorkerPool)).join()

        # Assert
        assert item.comment.status == CommentStatus.PENDING
        pushoo = await unit_env.get(PushooService)
        assert pushoo.sent == []


class TestQueries:
    """Tests for listing and lookup."""

    @pytest.mark.asyncio
    async def test_get_by_id_missing_raises(self, unit_env):
        service = await unit_env.get(CommentService)

        with pytest.raises(NotFoundError):
            await service.get_by_id(CommentId(404))

    @pytest.mark.asyncio
    async def test_list_by_path_counts_roots_and_replies(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        root = await repository.create(make_new_comment(minutes=0))
        await repository.create(make_new_comment(parent_id=root.id, minutes=1))
        await repository.create(make_new_comment(minutes=2))
        await repository.create(make_new_comment(target_path="/posts/other"))
        service = await unit_env.get(CommentService)

        # Act
        page = await service.list_by_path(PATH, page=1, page_size=10)

        # Assert
        assert page.total == 2
        assert page.total_with_children == 3
        assert page.items[0].comment.id != root.id

    @pytest.mark.asyncio
    async def test_list_latest_attaches_reply_targets(self, unit_env):
        # Arrange
        repository = await unit_env.get(CommentRepository)
        root = await repository.create(make_new_comment(nickname="Root", minutes=0))
        reply = await repository.create(
            make_new_comment(parent_id=root.id, minutes=1, nickname="Bob")
        )
        service = await unit_env.get(CommentService)

        # Act
        page = await service.list_latest(page=1, page_size=10)

        # Assert
        assert [item.comment.id for item in page.items] == [reply.id, root.id]
        assert page.items[0].reply_to.author.nickname == "Root"
        assert page.items[1].reply_to is None
        assert page.total == 2


class TestUpdates:
    """Tests for administrator edits."""

    @pytest.mark.asyncio
    async def test_like_and_unlike_never_go_below_zero(self, unit_env):
        # Arrange
        service = await unit_env.get(CommentService)
        item = await create(service)

        # Act
        liked = await service.like(item.comment.id)
        first = await service.unlike(item.comment.id)
        second = await service.unlike(item.comment.id)

        # Assert
        assert (liked, first, second) == (1, 0, 0)

    @pytest.mark.asyncio
    async def test_update_info_with_empty_email_clears_digest(self, unit_env):
        # Arrange
        service = await unit_env.get(CommentService)
        item = await create(service)

        # Act
        updated = await service.update_info(
            item.comment.id, nickname="  Alicia  ", email=""
        )

        # Assert
        assert updated.author.nickname == "Alicia"
        assert updated.author.email is None
        assert updated.email_md5 == ""
        assert updated.content == item.comment.content

    @pytest.mark.asyncio
    async def test_update_info_rerenders_content(self, unit_env):
        service = await unit_env.get(CommentService)
        item = await create(service)

        updated = await service.update_info(item.comment.id, content="*edited*")

        assert updated.content == "*edited*"
        assert "<em>edited</em>" in updated.content_html

    @pytest.mark.asyncio
    async def test_update_info_rejects_short_nickname(self, unit_env):
        service = await unit_env.get(CommentService)
        item = await create(service)

        with pytest.raises(ValidationError):
            await service.update_info(item.comment.id, nickname="A")

    @pytest.mark.asyncio
    async def test_update_content_rejects_overlong_text(self, unit_env):
        service = await unit_env.get(CommentService)
        item = await create(service)

        with pytest.raises(ValidationError):
            await service.update_content(item.comment.id, "x" * 1001)

    @pytest.mark.asyncio
    async def test_update_status_rejects_unknown_value(self, unit_env):
        service = await unit_env.get(CommentService)
        item = await create(service)

        with pytest.raises(ValidationError):
            await service.update_status(item.comment.id, 3)

    @pytest.mark.asyncio
    async def test_pin_and_unpin(self, unit_env):
        # Arrange
        service = await unit_env.get(CommentService)
        item = await create(service)

        # Act
        pinned = await service.set_pin(item.comment.id, True)
        unpinned = await service.set_pin(item.comment.id, False)

        # Assert
        assert pinned.pinned_at is not None
        assert unpinned.pinned_at is None

    @pytest.mark.asyncio
    async def test_update_path_moves_every_comment(self, unit_env):
        # Arrange
        service = await unit_env.get(CommentService)
        await create(service, ip="198.51.100.1")
        await create(service, ip="198.51.100.2")

        # Act
        moved = await service.update_path(PATH, "/posts/renamed")

        # Assert
        assert moved == 2
        page = await service.list_by_path("/posts/renamed", page=1, page_size=10)
        assert page.total == 2

    @pytest.mark.asyncio
    async def test_update_path_rejects_identical_paths(self, unit_env):
        service = await unit_env.get(CommentService)

        with pytest.raises(ValidationError):
            await service.update_path(PATH, PATH)

    @pytest.mark.asyncio
    async def test_delete_reports_removed_count(self, unit_env):
        # Arrange
        service = await unit_env.get(CommentService)
        item = await create(service)

        # Act
        deleted = await service.delete([item.comment.id, CommentId(999)])

        # Assert
        assert deleted == 1
        with pytest.raises(ValidationError):
            await service.delete([])


class TestQQInfo:
    """Tests for CommentService.get_qq_info."""

    @pytest.mark.asyncio
    async def test_malformed_number_is_rejected(self, unit_env):
        service = await unit_env.get(CommentService)

        with pytest.raises(ValidationError):
            await service.get_qq_info("0123")

    @pytest.mark.asyncio
    async def test_unconfigured_lookup_is_rejected(self, unit_env):
        service = await unit_env.get(CommentService)

        with pytest.raises(ValidationError):
            await service.get_qq_info("123456789")

    @pytest.mark.asyncio
    async def test_returns_nickname_and_avatar(self, unit_env):
        # Arrange
        settings = await unit_env.get(SettingService)
        settings.update(
            {
                "comment.qq_api_url": "https://qq.example/api",
                "comment.qq_api_key": "secret",
            }
        )
        client = await unit_env.get(QQProfileClient)
        client.nickname = "Penguin"
        service = await unit_env.get(CommentService)

        # Act
        profile = await service.get_qq_info("123456789")

        # Assert
        assert profile.nickname == "Penguin"
        assert "dst_uin=123456789" in profile.avatar
        assert client.calls == ["123456789"]
