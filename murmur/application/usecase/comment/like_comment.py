"""Like/unlike use case."""

from pydantic import BaseModel

from murmur.domain.service import CommentService
from murmur.util.ids import IdCodec

from .common import decode_comment_id


class LikeCommentRequest(BaseModel):
    comment_id: str  # Public id
    unlike: bool = False


class LikeCommentResponse(BaseModel):
    like_count: int


class LikeCommentUseCase:
    """Use case for adding or withdrawing a like."""

    def __init__(self, comment_service: CommentService, id_codec: IdCodec) -> None:
        self.comment_service = comment_service
        self.id_codec = id_codec

    async def execute(self, request: LikeCommentRequest) -> LikeCommentResponse:
        """Execute like flow.

        Returns:
            The new like count (never below zero)

        Raises:
            ValidationError: If the comment id is malformed
            NotFoundError: If the comment does not exist
        """
        comment_id = decode_comment_id(self.id_codec, request.comment_id)
        if request.unlike:
            count = await self.comment_service.unlike(comment_id)
        else:
            count = await self.comment_service.like(comment_id)
        return LikeCommentResponse(like_count=count)
