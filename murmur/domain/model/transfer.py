"""Comment export/import bundle.

The JSON field names are a published format: bundles written by one
instance must import into another.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from murmur.domain.model.common import utc_now

EXPORT_VERSION = "1.0"


class ExportCommentItem(BaseModel):
    """A single exported comment.

    ``id``, ``parent_id`` and ``reply_to_id`` are public identifiers from the
    exporting instance; they are only used to rebuild the reply structure.
    """

    id: str
    created_at: datetime
    updated_at: datetime
    pinned_at: Optional[str] = None  # RFC 3339 string

    content: str
    content_html: str = ""

    target_path: str
    target_title: str = ""

    nickname: str
    email: str = ""
    website: str = ""
    ip_address: str = ""
    ip_location: str = ""
    user_agent: str = ""

    parent_id: str = ""
    reply_to_id: str = ""

    status: int = 0
    is_admin_comment: bool = False
    is_anonymous: bool = False
    like_count: int = 0


class ExportBundle(BaseModel):
    """Versioned export document."""

    version: str = EXPORT_VERSION
    export_at: datetime = Field(default_factory=utc_now)
    comments: list[ExportCommentItem] = []
    meta: dict[str, Any] = {}


class ImportOptions(BaseModel):
    """How an import treats existing data and missing fields."""

    skip_existing: bool = False
    default_status: int = 0
    keep_create_time: bool = False


class ImportResult(BaseModel):
    """Per-item outcome counts of an import."""

    total_count: int = 0
    success_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0
    errors: list[str] = []
