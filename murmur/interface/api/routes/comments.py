"""Public comment routes."""

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Query, Request, status

from murmur.application.usecase.comment import (
    CommentListResponse,
    CommentResponse,
    CreateCommentContext,
    CreateCommentRequest,
    CreateCommentUseCase,
    GetQQInfoRequest,
    GetQQInfoResponse,
    GetQQInfoUseCase,
    LikeCommentRequest,
    LikeCommentResponse,
    LikeCommentUseCase,
    ListChildrenRequest,
    ListChildrenUseCase,
    ListCommentsRequest,
    ListCommentsUseCase,
    ListLatestRequest,
    ListLatestUseCase,
)
from murmur.config import APISettings
from murmur.interface.api.request import bearer_token, client_ip

router = APIRouter(prefix="/comments", tags=["comments"], route_class=DishkaRoute)


@router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    body: CreateCommentRequest,
    request: Request,
    create_comment_use_case: FromDishka[CreateCommentUseCase],
    api_settings: FromDishka[APISettings],
) -> CommentResponse:
    """Submit a comment or a reply.

    Signing in is optional; a valid token marks the comment as written by
    that user.
    """
    context = CreateCommentContext(
        ip=client_ip(request, api_settings.trusted_proxies),
        user_agent=request.headers.get("user-agent", ""),
        referer=request.headers.get("referer", ""),
        auth_token=bearer_token(request),
    )
    return await create_comment_use_case.execute(body, context)


@router.get("", response_model=CommentListResponse)
async def list_comments(
    list_comments_use_case: FromDishka[ListCommentsUseCase],
    target_path: str = Query(min_length=1),
    page: int = 1,
    page_size: int = Query(default=10, alias="pageSize"),
) -> CommentListResponse:
    """Root comments of a page, each with a short reply preview."""
    return await list_comments_use_case.execute(
        ListCommentsRequest(target_path=target_path, page=page, page_size=page_size)
    )


@router.get("/latest", response_model=CommentListResponse)
async def list_latest(
    list_latest_use_case: FromDishka[ListLatestUseCase],
    page: int = 1,
    page_size: int = Query(default=10, alias="pageSize"),
) -> CommentListResponse:
    """Newest published comments across the whole site."""
    return await list_latest_use_case.execute(
        ListLatestRequest(page=page, page_size=page_size)
    )


@router.get("/qq-info", response_model=GetQQInfoResponse)
async def get_qq_info(
    request: Request,
    get_qq_info_use_case: FromDishka[GetQQInfoUseCase],
    qq: str = Query(min_length=1),
) -> GetQQInfoResponse:
    """Nickname and avatar for a QQ number, used to prefill the form."""
    return await get_qq_info_use_case.execute(
        GetQQInfoRequest(qq_number=qq, referer=request.headers.get("referer", ""))
    )


@router.get("/{comment_id}/children", response_model=CommentListResponse)
async def list_children(
    comment_id: str,
    list_children_use_case: FromDishka[ListChildrenUseCase],
    page: int = 1,
    page_size: int = Query(default=3, alias="pageSize"),
) -> CommentListResponse:
    """Replies under a root comment."""
    return await list_children_use_case.execute(
        ListChildrenRequest(parent_id=comment_id, page=page, page_size=page_size)
    )


@router.post("/{comment_id}/like", response_model=LikeCommentResponse)
async def like_comment(
    comment_id: str, like_comment_use_case: FromDishka[LikeCommentUseCase]
) -> LikeCommentResponse:
    return await like_comment_use_case.execute(
        LikeCommentRequest(comment_id=comment_id)
    )


@router.post("/{comment_id}/unlike", response_model=LikeCommentResponse)
async def unlike_comment(
    comment_id: str, like_comment_use_case: FromDishka[LikeCommentUseCase]
) -> LikeCommentResponse:
    return await like_comment_use_case.execute(
        LikeCommentRequest(comment_id=comment_id, unlike=True)
    )
