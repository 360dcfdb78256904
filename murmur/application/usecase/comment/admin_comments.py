"""Comment administration use cases."""

from typing import Optional

from pydantic import BaseModel, Field

from murmur.domain.error import ValidationError
from murmur.domain.repository import CommentFilter
from murmur.domain.service import CommentService, ThreadItem
from murmur.domain.value import CommentStatus
from murmur.util.ids import IdCodec

from .common import (
    AdminCommentListResponse,
    AdminCommentResponse,
    clamp_page,
    decode_comment_id,
    decode_comment_ids,
)
from .presenter import CommentPresenter


class AdminListRequest(BaseModel):
    """Admin search; text fields match substrings."""

    page: int = 1
    page_size: int = 10
    nickname: Optional[str] = None
    email: Optional[str] = None
    ip_address: Optional[str] = None
    content: Optional[str] = None
    target_path: Optional[str] = None
    status: Optional[int] = None


class DeleteCommentsRequest(BaseModel):
    ids: list[str]


class DeleteCommentsResponse(BaseModel):
    deleted_count: int


class UpdateStatusRequest(BaseModel):
    comment_id: str
    status: int


class SetPinRequest(BaseModel):
    comment_id: str
    pinned: bool


class UpdateContentRequest(BaseModel):
    comment_id: str
    content: str


class UpdateInfoRequest(BaseModel):
    """Partial edit; omitted fields stay unchanged."""

    comment_id: str
    content: Optional[str] = None
    nickname: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None


class UpdatePathRequest(BaseModel):
    old_path: str
    new_path: str


class UpdatePathResponse(BaseModel):
    updated_count: int


class AdminListCommentsUseCase:
    """Use case for the filtered admin comment list."""

    def __init__(
        self, comment_service: CommentService, presenter: CommentPresenter
    ) -> None:
        self.comment_service = comment_service
        self.presenter = presenter

    async def execute(self, request: AdminListRequest) -> AdminCommentListResponse:
        status = None
        if request.status is not None:
            try:
                status = CommentStatus(request.status)
            except ValueError:
                raise ValidationError("Invalid status filter")

        page, page_size = clamp_page(request.page, request.page_size)
        conditions = CommentFilter(
            page=page,
            page_size=page_size,
            nickname=request.nickname or None,
            email=request.email or None,
            ip_address=request.ip_address or None,
            content=request.content or None,
            target_path=request.target_path or None,
            status=status,
        )
        result = await self.comment_service.admin_list(conditions)
        return await self.presenter.present_admin_page(result)


class DeleteCommentsUseCase:
    """Use case for bulk deletion."""

    def __init__(self, comment_service: CommentService, id_codec: IdCodec) -> None:
        self.comment_service = comment_service
        self.id_codec = id_codec

    async def execute(self, request: DeleteCommentsRequest) -> DeleteCommentsResponse:
        """Execute delete flow.

        Invalid ids are skipped.

        Raises:
            ValidationError: If no ids are given or none of them is valid
        """
        if not request.ids:
            raise ValidationError("Comment id list cannot be empty")
        comment_ids = decode_comment_ids(self.id_codec, request.ids)
        deleted = await self.comment_service.delete(comment_ids)
        return DeleteCommentsResponse(deleted_count=deleted)


class UpdateCommentUseCase:
    """Use case for single-comment admin edits (status, pin, content, info)."""

    def __init__(
        self,
        comment_service: CommentService,
        presenter: CommentPresenter,
        id_codec: IdCodec,
    ) -> None:
        self.comment_service = comment_service
        self.presenter = presenter
        self.id_codec = id_codec

    async def _respond(self, comment) -> AdminCommentResponse:
        return await self.presenter.present_admin(ThreadItem(comment=comment))

    async def update_status(self, request: UpdateStatusRequest) -> AdminCommentResponse:
        comment_id = decode_comment_id(self.id_codec, request.comment_id)
        comment = await self.comment_service.update_status(comment_id, request.status)
        return await self._respond(comment)

    async def set_pin(self, request: SetPinRequest) -> AdminCommentResponse:
        comment_id = decode_comment_id(self.id_codec, request.comment_id)
        comment = await self.comment_service.set_pin(comment_id, request.pinned)
        return await self._respond(comment)

    async def update_content(
        self, request: UpdateContentRequest
    ) -> AdminCommentResponse:
        comment_id = decode_comment_id(self.id_codec, request.comment_id)
        comment = await self.comment_service.update_content(
            comment_id, request.content
        )
        return await self._respond(comment)

    async def execute(self, request: UpdateInfoRequest) -> AdminCommentResponse:
        """Partially edit author fields and content.

        Raises:
            ValidationError: Malformed id, or a field outside its length limits
            NotFoundError: If the comment does not exist
        """
        comment_id = decode_comment_id(self.id_codec, request.comment_id)
        comment = await self.comment_service.update_info(
            comment_id,
            content=request.content,
            nickname=request.nickname,
            email=request.email,
            website=request.website,
        )
        return await self._respond(comment)


class UpdatePathUseCase:
    """Use case for moving comments after a page or post is renamed."""

    def __init__(self, comment_service: CommentService) -> None:
        self.comment_service = comment_service

    async def execute(self, request: UpdatePathRequest) -> UpdatePathResponse:
        moved = await self.comment_service.update_path(
            request.old_path.strip(), request.new_path.strip()
        )
        return UpdatePathResponse(updated_count=moved)
