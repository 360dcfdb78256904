"""Unit tests for LikeCommentUseCase and GetQQInfoUseCase."""

import pytest

from murmur.application.usecase.comment import (
    GetQQInfoRequest,
    GetQQInfoUseCase,
    LikeCommentRequest,
    LikeCommentUseCase,
)
from murmur.domain.error import NotFoundError, ValidationError
from murmur.domain.repository import CommentRepository
from murmur.domain.service import SettingService
from murmur.util.ids import IdCodec
from tests.conftest import make_new_comment
from tests.harness import create_env_fixture

# Unit test fixture
unit_env = create_env_fixture()


class TestLikeCommentUseCase:
    """Tests for LikeCommentUseCase."""

    @pytest.mark.asyncio
    async def test_like_then_unlike(self, unit_env):
        # Arrange
        comment = await (await unit_env.get(CommentRepository)).create(
            make_new_comment()
        )
        public_id = (await unit_env.get(IdCodec)).encode_comment(comment.id)
        use_case = await unit_env.get(LikeCommentUseCase)

        # Act
        liked = await use_case.execute(LikeCommentRequest(comment_id=public_id))
        unliked = await use_case.execute(
            LikeCommentRequest(comment_id=public_id, unlike=True)
        )

        # Assert
        assert (liked.like_count, unliked.like_count) == (1, 0)

    @pytest.mark.asyncio
    async def test_unknown_comment(self, unit_env):
        public_id = (await unit_env.get(IdCodec)).encode_comment(404)
        use_case = await unit_env.get(LikeCommentUseCase)

        with pytest.raises(NotFoundError):
            await use_case.execute(LikeCommentRequest(comment_id=public_id))

    @pytest.mark.asyncio
    async def test_malformed_id(self, unit_env):
        use_case = await unit_env.get(LikeCommentUseCase)

        with pytest.raises(ValidationError):
            await use_case.execute(LikeCommentRequest(comment_id="***"))


class TestGetQQInfoUseCase:
    """Tests for GetQQInfoUseCase."""

    @pytest.mark.asyncio
    async def test_number_is_trimmed(self, unit_env):
        # Arrange
        settings = await unit_env.get(SettingService)
        settings.update(
            {"comment.qq_api_url": "https://qq.example", "comment.qq_api_key": "k"}
        )
        use_case = await unit_env.get(GetQQInfoUseCase)

        # Act
        response = await use_case.execute(GetQQInfoRequest(qq_number=" 10001 "))

        # Assert
        assert response.nickname == "QQ User"
        assert response.avatar.endswith("dst_uin=10001&spec=100")
