"""Shared comment request/response models and helpers."""

from datetime import datetime
from typing import Optional

import logfire
from pydantic import BaseModel, Field

from murmur.domain.error import ValidationError
from murmur.domain.value import CommentId
from murmur.util.error import InvalidPublicIdError
from murmur.util.ids import IdCodec

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def clamp_page(page: int, page_size: int) -> tuple[int, int]:
    """Page numbers start at 1; sizes outside 1..100 fall back to 10."""
    if page < 1:
        page = 1
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE
    return page, page_size


def decode_comment_id(id_codec: IdCodec, public_id: str) -> CommentId:
    """Decode a public comment id.

    Raises:
        ValidationError: If the id is malformed or names another entity kind
    """
    try:
        return CommentId(id_codec.decode_comment(public_id))
    except InvalidPublicIdError:
        raise ValidationError(f"Invalid comment id: {public_id}")


def decode_optional_comment_id(
    id_codec: IdCodec, public_id: Optional[str]
) -> Optional[CommentId]:
    if not public_id:
        return None
    return decode_comment_id(id_codec, public_id)


def decode_comment_ids(id_codec: IdCodec, public_ids: list[str]) -> list[CommentId]:
    """Decode a batch of ids, skipping (and logging) the invalid ones."""
    decoded = []
    for public_id in public_ids:
        try:
            decoded.append(CommentId(id_codec.decode_comment(public_id)))
        except InvalidPublicIdError:
            logfire.warn("Skipping invalid comment id", public_id=public_id)
    return decoded


class CommentResponse(BaseModel):
    """A comment as shown to visitors."""

    id: str
    created_at: datetime
    pinned_at: Optional[datetime] = None
    nickname: str
    email_md5: str
    qq_number: Optional[str] = None
    avatar_url: Optional[str] = None
    website: Optional[str] = None
    content_html: str
    is_admin_comment: bool
    is_anonymous: bool
    ip_location: Optional[str] = None
    user_agent: Optional[str] = None
    target_path: str
    target_title: Optional[str] = None
    parent_id: Optional[str] = None
    reply_to_id: Optional[str] = None
    reply_to_nick: Optional[str] = None
    like_count: int
    total_children: int = 0
    children: list["CommentResponse"] = []


class AdminCommentResponse(CommentResponse):
    """Adds the fields only administrators may see."""

    email: Optional[str] = None
    ip_address: str = ""
    content: str = ""
    status: int = 0


class CommentListResponse(BaseModel):
    """One page of comments."""

    items: list[CommentResponse] = Field(default=[], serialization_alias="list")
    total: int
    total_with_children: int
    page: int
    page_size: int = Field(serialization_alias="pageSize")


class AdminCommentListResponse(BaseModel):
    items: list[AdminCommentResponse] = Field(default=[], serialization_alias="list")
    total: int
    page: int
    page_size: int = Field(serialization_alias="pageSize")
