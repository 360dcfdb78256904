"""QQ profile lookup use case."""

from pydantic import BaseModel

from murmur.domain.service import CommentService


class GetQQInfoRequest(BaseModel):
    qq_number: str
    referer: str = ""


class GetQQInfoResponse(BaseModel):
    nickname: str
    avatar: str


class GetQQInfoUseCase:
    """Use case for prefilling the comment form from a QQ number."""

    def __init__(self, comment_service: CommentService) -> None:
        self.comment_service = comment_service

    async def execute(self, request: GetQQInfoRequest) -> GetQQInfoResponse:
        profile = await self.comment_service.get_qq_info(
            request.qq_number.strip(), request.referer
        )
        return GetQQInfoResponse(nickname=profile.nickname, avatar=profile.avatar)
