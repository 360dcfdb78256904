"""Integration tests for thread listing across use cases, services and storage."""

import pytest

from murmur.application.usecase.comment import (
    ListChildrenRequest,
    ListChildrenUseCase,
    ListCommentsRequest,
    ListCommentsUseCase,
)
from murmur.domain.repository import CommentRepository
from tests.conftest import make_new_comment
from tests.harness import create_env_fixture

# Integration test fixture
integration_env = create_env_fixture()

PATH = "/posts/hello"


async def seed_thread(env):
    """One root with five direct replies and a reply to the first of them."""
    repo = await env.get(CommentRepository)
    root = await repo.create(make_new_comment(nickname="Root", minutes=0))
    replies = [
        await repo.create(
            make_new_comment(nickname=f"r{i}", parent_id=root.id, minutes=i)
        )
        for i in range(1, 6)
    ]
    await repo.create(
        make_new_comment(
            nickname="r6", parent_id=root.id, reply_to_id=replies[0].id, minutes=6
        )
    )


class TestThreadListingIntegration:
    """Thread previews and reply pagination."""

    @pytest.mark.asyncio
    async def test_page_shows_three_newest_chain_heads(self, integration_env):
        # Arrange
        await seed_thread(integration_env)
        use_case = await integration_env.get(ListCommentsUseCase)

        # Act
        response = await use_case.execute(ListCommentsRequest(target_path=PATH))

        # Assert
        assert (response.total, response.total_with_children) == (1, 7)
        root = response.items[0]
        assert root.total_children == 6
        assert [c.nickname for c in root.children] == ["r5", "r4", "r3"]

    @pytest.mark.asyncio
    async def test_children_preview_matches_page_preview(self, integration_env):
        # Arrange
        await seed_thread(integration_env)
        listing = await integration_env.get(ListCommentsUseCase)
        children = await integration_env.get(ListChildrenUseCase)
        page = await listing.execute(ListCommentsRequest(target_path=PATH))
        root_id = page.items[0].id

        # Act
        preview = await children.execute(ListChildrenRequest(parent_id=root_id))

        # Assert
        assert [c.id for c in preview.items] == [c.id for c in page.items[0].children]
        assert preview.total == 6

    @pytest.mark.asyncio
    async def test_full_pagination_is_newest_first(self, integration_env):
        # Arrange
        await seed_thread(integration_env)
        listing = await integration_env.get(ListCommentsUseCase)
        children = await integration_env.get(ListChildrenUseCase)
        page = await listing.execute(ListCommentsRequest(target_path=PATH))
        root_id = page.items[0].id

        # Act
        second = await children.execute(
            ListChildrenRequest(parent_id=root_id, page=2, page_size=3)
        )
        everything = await children.execute(
            ListChildrenRequest(parent_id=root_id, page=1, page_size=10)
        )

        # Assert
        assert [c.nickname for c in second.items] == ["r3", "r2", "r1"]
        assert everything.items[0].nickname == "r6"
        assert everything.items[0].reply_to_nick == "r1"
        assert everything.items[1].reply_to_nick == "Root"
