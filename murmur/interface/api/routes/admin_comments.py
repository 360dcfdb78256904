"""Comment administration routes.

Every route requires a token belonging to a member of the admin group,
sent as ``Authorization: Bearer <token>`` or in the ``auth_token`` cookie.
"""

from typing import Optional

import logfire
from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Form, Request, Response, UploadFile
from pydantic import BaseModel

from murmur.application.usecase.comment import (
    AdminCommentListResponse,
    AdminCommentResponse,
    AdminListCommentsUseCase,
    AdminListRequest,
    AuthorizeAdminUseCase,
    DeleteCommentsRequest,
    DeleteCommentsResponse,
    DeleteCommentsUseCase,
    ExportCommentsRequest,
    ExportCommentsUseCase,
    ImportCommentsRequest,
    ImportCommentsUseCase,
    SetPinRequest,
    UpdateCommentUseCase,
    UpdateContentRequest,
    UpdateInfoRequest,
    UpdatePathRequest,
    UpdatePathResponse,
    UpdatePathUseCase,
    UpdateStatusRequest,
)
from murmur.application.usecase.comment.transfer_comments import (
    EXPORT_ZIP_MEDIA_TYPE,
)
from murmur.domain.model import ExportBundle, ImportOptions, ImportResult
from murmur.interface.api.request import bearer_token

router = APIRouter(
    prefix="/admin/comments", tags=["admin-comments"], route_class=DishkaRoute
)

EXPORT_ZIP_FILENAME = "comments-export.zip"


class StatusAPIRequest(BaseModel):
    status: int


class PinAPIRequest(BaseModel):
    pinned: bool


class ContentAPIRequest(BaseModel):
    content: str


class InfoAPIRequest(BaseModel):
    """Fields left out are not changed; an empty email clears it."""

    content: Optional[str] = None
    nickname: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None


async def _require_admin(request: Request, authorize: AuthorizeAdminUseCase) -> None:
    admin = await authorize.execute(bearer_token(request))
    logfire.debug("Admin request", user_id=admin.id, path=request.url.path)


@router.get("", response_model=AdminCommentListResponse)
async def list_comments(
    request: Request,
    authorize: FromDishka[AuthorizeAdminUseCase],
    admin_list_use_case: FromDishka[AdminListCommentsUseCase],
    page: int = 1,
    page_size: int = 10,
    nickname: Optional[str] = None,
    email: Optional[str] = None,
    ip_address: Optional[str] = None,
    content: Optional[str] = None,
    target_path: Optional[str] = None,
    status: Optional[int] = None,
) -> AdminCommentListResponse:
    """Search comments of every status."""
    await _require_admin(request, authorize)
    return await admin_list_use_case.execute(
        AdminListRequest(
            page=page,
            page_size=page_size,
            nickname=nickname,
            email=email,
            ip_address=ip_address,
            content=content,
            target_path=target_path,
            status=status,
        )
    )


@router.post("/delete", response_model=DeleteCommentsResponse)
async def delete_comments(
    body: DeleteCommentsRequest,
    request: Request,
    authorize: FromDishka[AuthorizeAdminUseCase],
    delete_use_case: FromDishka[DeleteCommentsUseCase],
) -> DeleteCommentsResponse:
    """Delete comments in bulk; invalid ids are skipped."""
    await _require_admin(request, authorize)
    return await delete_use_case.execute(body)


@router.put("/{comment_id}/status", response_model=AdminCommentResponse)
async def update_status(
    comment_id: str,
    body: StatusAPIRequest,
    request: Request,
    authorize: FromDishka[AuthorizeAdminUseCase],
    update_use_case: FromDishka[UpdateCommentUseCase],
) -> AdminCommentResponse:
    await _require_admin(request, authorize)
    return await update_use_case.update_status(
        UpdateStatusRequest(comment_id=comment_id, status=body.status)
    )


@router.put("/{comment_id}/pin", response_model=AdminCommentResponse)
async def set_pin(
    comment_id: str,
    body: PinAPIRequest,
    request: Request,
    authorize: FromDishka[AuthorizeAdminUseCase],
    update_use_case: FromDishka[UpdateCommentUseCase],
) -> AdminCommentResponse:
    await _require_admin(request, authorize)
    return await update_use_case.set_pin(
        SetPinRequest(comment_id=comment_id, pinned=body.pinned)
    )


@router.put("/{comment_id}/content", response_model=AdminCommentResponse)
async def update_content(
    comment_id: str,
    body: ContentAPIRequest,
    request: Request,
    authorize: FromDishka[AuthorizeAdminUseCase],
    update_use_case: FromDishka[UpdateCommentUseCase],
) -> AdminCommentResponse:
    await _require_admin(request, authorize)
    return await update_use_case.update_content(
        UpdateContentRequest(comment_id=comment_id, content=body.content)
    )


@router.put("/{comment_id}/info", response_model=AdminCommentResponse)
async def update_info(
    comment_id: str,
    body: InfoAPIRequest,
    request: Request,
    authorize: FromDishka[AuthorizeAdminUseCase],
    update_use_case: FromDishka[UpdateCommentUseCase],
) -> AdminCommentResponse:
    """Partially edit content and author details."""
    await _require_admin(request, authorize)
    return await update_use_case.execute(
        UpdateInfoRequest(
            comment_id=comment_id, **body.model_dump(exclude_unset=True)
        )
    )


@router.put("/path", response_model=UpdatePathResponse)
async def update_path(
    body: UpdatePathRequest,
    request: Request,
    authorize: FromDishka[AuthorizeAdminUseCase],
    update_path_use_case: FromDishka[UpdatePathUseCase],
) -> UpdatePathResponse:
    """Move every comment on ``old_path`` to ``new_path``."""
    await _require_admin(request, authorize)
    return await update_path_use_case.execute(body)


@router.post("/export", response_model=ExportBundle)
async def export_comments(
    body: ExportCommentsRequest,
    request: Request,
    authorize: FromDishka[AuthorizeAdminUseCase],
    export_use_case: FromDishka[ExportCommentsUseCase],
) -> ExportBundle:
    """Export the given comments as JSON, or all comments when no ids are given."""
    await _require_admin(request, authorize)
    return await export_use_case.execute(body)


@router.post("/export/zip")
async def export_comments_zip(
    body: ExportCommentsRequest,
    request: Request,
    authorize: FromDishka[AuthorizeAdminUseCase],
    export_use_case: FromDishka[ExportCommentsUseCase],
) -> Response:
    """Export as a ZIP archive holding ``comments.json`` and a README."""
    await _require_admin(request, authorize)
    archive = await export_use_case.export_zip(body)
    return Response(
        content=archive,
        media_type=EXPORT_ZIP_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{EXPORT_ZIP_FILENAME}"'
        },
    )


@router.post("/import", response_model=ImportResult)
async def import_comments(
    file: UploadFile,
    request: Request,
    authorize: FromDishka[AuthorizeAdminUseCase],
    import_use_case: FromDishka[ImportCommentsUseCase],
    skip_existing: bool = Form(default=False),
    default_status: int = Form(default=0),
    keep_create_time: bool = Form(default=False),
) -> ImportResult:
    """Import an uploaded ``.json`` bundle or export ``.zip`` archive."""
    await _require_admin(request, authorize)
    data = await file.read()
    return await import_use_case.execute(
        ImportCommentsRequest(
            filename=file.filename or "",
            data=data,
            options=ImportOptions(
                skip_existing=skip_existing,
                default_status=default_status,
                keep_create_time=keep_create_time,
            ),
        )
    )
