"""Comment use cases."""

from .admin_comments import (
    AdminListCommentsUseCase,
    AdminListRequest,
    DeleteCommentsRequest,
    DeleteCommentsResponse,
    DeleteCommentsUseCase,
    SetPinRequest,
    UpdateCommentUseCase,
    UpdateContentRequest,
    UpdateInfoRequest,
    UpdatePathRequest,
    UpdatePathResponse,
    UpdatePathUseCase,
    UpdateStatusRequest,
)
from .authorize_admin import AuthorizeAdminUseCase
from .common import (
    AdminCommentListResponse,
    AdminCommentResponse,
    CommentListResponse,
    CommentResponse,
)
from .create_comment import (
    CreateCommentContext,
    CreateCommentRequest,
    CreateCommentUseCase,
)
from .like_comment import LikeCommentRequest, LikeCommentResponse, LikeCommentUseCase
from .list_comments import (
    ListChildrenRequest,
    ListChildrenUseCase,
    ListCommentsRequest,
    ListCommentsUseCase,
    ListLatestRequest,
    ListLatestUseCase,
)
from .presenter import CommentPresenter, FileService
from .qq_info import GetQQInfoRequest, GetQQInfoResponse, GetQQInfoUseCase
from .transfer_comments import (
    ExportCommentsRequest,
    ExportCommentsUseCase,
    ImportCommentsRequest,
    ImportCommentsUseCase,
)

__all__ = [
    "AdminCommentListResponse",
    "AdminCommentResponse",
    "AdminListCommentsUseCase",
    "AdminListRequest",
    "AuthorizeAdminUseCase",
    "CommentListResponse",
    "CommentPresenter",
    "CommentResponse",
    "CreateCommentContext",
    "CreateCommentRequest",
    "CreateCommentUseCase",
    "DeleteCommentsRequest",
    "DeleteCommentsResponse",
    "DeleteCommentsUseCase",
    "ExportCommentsRequest",
    "ExportCommentsUseCase",
    "FileService",
    "GetQQInfoRequest",
    "GetQQInfoResponse",
    "GetQQInfoUseCase",
    "ImportCommentsRequest",
    "ImportCommentsUseCase",
    "LikeCommentRequest",
    "LikeCommentResponse",
    "LikeCommentUseCase",
    "ListChildrenRequest",
    "ListChildrenUseCase",
    "ListCommentsRequest",
    "ListCommentsUseCase",
    "ListLatestRequest",
    "ListLatestUseCase",
    "SetPinRequest",
    "UpdateCommentUseCase",
    "UpdateContentRequest",
    "UpdateInfoRequest",
    "UpdatePathRequest",
    "UpdatePathResponse",
    "UpdatePathUseCase",
    "UpdateStatusRequest",
]
