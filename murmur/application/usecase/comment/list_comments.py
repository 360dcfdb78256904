"""Comment listing use cases."""

from pydantic import BaseModel

from murmur.domain.service import CommentService
from murmur.util.ids import IdCodec

from .common import CommentListResponse, clamp_page, decode_comment_id
from .presenter import CommentPresenter


class ListCommentsRequest(BaseModel):
    """Top-level comments of one page."""

    target_path: str
    page: int = 1
    page_size: int = 10


class ListChildrenRequest(BaseModel):
    """Replies below one comment."""

    parent_id: str  # Public id
    page: int = 1
    page_size: int = 3


class ListLatestRequest(BaseModel):
    page: int = 1
    page_size: int = 10


class ListCommentsUseCase:
    """Use case for a page's threads, each with a reply preview."""

    def __init__(
        self, comment_service: CommentService, presenter: CommentPresenter
    ) -> None:
        self.comment_service = comment_service
        self.presenter = presenter

    async def execute(self, request: ListCommentsRequest) -> CommentListResponse:
        page, page_size = clamp_page(request.page, request.page_size)
        result = await self.comment_service.list_by_path(
            request.target_path, page, page_size
        )
        return await self.presenter.present_page(result)


class ListChildrenUseCase:
    """Use case for expanding the replies of one comment."""

    def __init__(
        self,
        comment_service: CommentService,
        presenter: CommentPresenter,
        id_codec: IdCodec,
    ) -> None:
        self.comment_service = comment_service
        self.presenter = presenter
        self.id_codec = id_codec

    async def execute(self, request: ListChildrenRequest) -> CommentListResponse:
        """Execute list children flow.

        A first page of at most three items is the thread preview; any other
        request pages through every reply, newest first.

        Raises:
            ValidationError: If the parent id is malformed
            NotFoundError: If the parent comment does not exist
        """
        parent_id = decode_comment_id(self.id_codec, request.parent_id)
        page, page_size = clamp_page(request.page, request.page_size)
        result = await self.comment_service.list_children(parent_id, page, page_size)
        return await self.presenter.present_page(result)


class ListLatestUseCase:
    """Use case for the site-wide feed of recent comments."""

    def __init__(
        self, comment_service: CommentService, presenter: CommentPresenter
    ) -> None:
        self.comment_service = comment_service
        self.presenter = presenter

    async def execute(self, request: ListLatestRequest) -> CommentListResponse:
        page, page_size = clamp_page(request.page, request.page_size)
        result = await self.comment_service.list_latest(page, page_size)
        return await self.presenter.present_page(result)
