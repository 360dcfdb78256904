"""Comment export and import."""

import io
import zipfile
from datetime import datetime, timezone
from typing import Optional

import logfire
from pydantic import ValidationError as SchemaError

from murmur.domain.error import ValidationError
from murmur.domain.model import (
    Comment,
    CommentAuthor,
    ExportBundle,
    ExportCommentItem,
    ImportOptions,
    ImportResult,
)
from murmur.domain.model.common import utc_now
from murmur.domain.repository import CommentFilter, CommentRepository, NewComment
from murmur.domain.value import CommentId, CommentStatus
from murmur.render.renderer import MarkdownRenderer
from murmur.util.ids import IdCodec

from .base import Service
from .comment_service import email_digest

EXPORTED_BY = "murmur"
EXPORT_JSON_NAME = "comments.json"
EXPORT_README_NAME = "README.md"

# Import resolves replies level by level, this many levels at most
MAX_IMPORT_SWEEPS = 10

_EXPORT_PAGE_SIZE = 500

_README_TEMPLATE = """# Comment export

- Exported at: {export_at}
- Format version: {version}
- Comments: {count}

## Files

- comments.json: every exported comment (JSON)

## Importing

Upload either comments.json or this ZIP archive through the comment import
endpoint.

## Fields

- id: public comment id
- content: Markdown source
- content_html: rendered HTML
- target_path: page the comment belongs to
- nickname: commenter nickname
- email: commenter email
- status: 1 published, 2 pending review
- parent_id: parent comment id, for replies
- reply_to_id: comment shown as "replying to"
- created_at: creation time
"""


def format_pin_time(value: Optional[datetime]) -> Optional[str]:
    """RFC 3339 text for a pin timestamp (UTC as ``Z``)."""
    if value is None:
        return None
    text = value.astimezone(timezone.utc).isoformat(timespec="seconds")
    return text.replace("+00:00", "Z")


def parse_pin_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        logfire.warn("Unreadable pin time ignored", value=value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _oldest_first(item: ExportCommentItem) -> datetime:
    # Uploaded bundles may mix naive and aware timestamps
    created = item.created_at
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


class CommentTransferService(Service):
    """Moves comments between instances as versioned JSON bundles."""

    def __init__(
        self,
        comment_repository: CommentRepository,
        id_codec: IdCodec,
        renderer: MarkdownRenderer,
    ) -> None:
        """Initialize transfer service.

        Args:
            comment_repository: Comment repository
            id_codec: Public id encoder, for the ids written to bundles
            renderer: Renders or sanitizes the HTML of imported comments
        """
        self.comment_repository = comment_repository
        self.id_codec = id_codec
        self.renderer = renderer

    def to_item(self, comment: Comment) -> ExportCommentItem:
        encode = self.id_codec.encode_comment
        return ExportCommentItem(
            id=encode(comment.id),
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            pinned_at=format_pin_time(comment.pinned_at),
            content=comment.content,
            content_html=comment.content_html,
            target_path=comment.target_path,
            target_title=comment.target_title or "",
            nickname=comment.author.nickname,
            email=comment.author.email or "",
            website=comment.author.website or "",
            ip_address=comment.author.ip_address,
            ip_location=comment.author.ip_location,
            user_agent=comment.author.user_agent,
            parent_id=encode(comment.parent_id) if comment.parent_id else "",
            reply_to_id=encode(comment.reply_to_id) if comment.reply_to_id else "",
            status=int(comment.status),
            is_admin_comment=comment.is_admin_author,
            is_anonymous=comment.is_anonymous,
            like_count=comment.like_count,
        )

    def _bundle(self, comments: list[Comment], total: int) -> ExportBundle:
        return ExportBundle(
            export_at=utc_now(),
            comments=[self.to_item(c) for c in comments],
            meta={"total_comments": total, "export_by": EXPORTED_BY},
        )

    async def export(self, comment_ids: list[CommentId]) -> ExportBundle:
        """Export the given comments (unknown ids are ignored)."""
        with logfire.span("transfer_service.export", requested=len(comment_ids)):
            comments = await self.comment_repository.find_many_by_ids(comment_ids)
            logfire.info("Comments exported", count=len(comments))
            return self._bundle(comments, len(comment_ids))

    async def export_all(self) -> ExportBundle:
        """Export every comment regardless of status."""
        with logfire.span("transfer_service.export_all"):
            comments: list[Comment] = []
            page = 1
            while True:
                batch, total = await self.comment_repository.find_with_conditions(
                    CommentFilter(page=page, page_size=_EXPORT_PAGE_SIZE)
                )
                comments.extend(batch)
                if not batch or len(comments) >= total:
                    break
                page += 1
            logfire.info("All comments exported", count=len(comments))
            return self._bundle(comments, len(comments))

    async def export_zip(self, comment_ids: list[CommentId]) -> bytes:
        """ZIP archive holding ``comments.json`` and a README.

        An empty id list exports every comment.
        """
        if comment_ids:
            bundle = await self.export(comment_ids)
        else:
            bundle = await self.export_all()

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(EXPORT_JSON_NAME, bundle.model_dump_json(indent=2))
            archive.writestr(
                EXPORT_README_NAME,
                _README_TEMPLATE.format(
                    export_at=bundle.export_at.strftime("%Y-%m-%d %H:%M:%S"),
                    version=bundle.version,
                    count=len(bundle.comments),
                ),
            )
        return buffer.getvalue()

    async def import_json(self, data: bytes, options: ImportOptions) -> ImportResult:
        """Import a bundle from its JSON text.

        Raises:
            ValidationError: If ``data`` is not a valid export bundle
        """
        try:
            bundle = ExportBundle.model_validate_json(data)
        except SchemaError as e:
            logfire.warn("Rejected malformed import data", errors=e.error_count())
            raise ValidationError(f"Invalid export data: {e.error_count()} errors")
        return await self.import_bundle(bundle, options)

    async def import_zip(self, data: bytes, options: ImportOptions) -> ImportResult:
        """Import the ``comments.json`` found in a ZIP archive.

        Raises:
            ValidationError: If the archive is unreadable or has no comments.json
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as archive:
                if EXPORT_JSON_NAME not in archive.namelist():
                    raise ValidationError("comments.json not found in archive")
                payload = archive.read(EXPORT_JSON_NAME)
        except zipfile.BadZipFile:
            raise ValidationError("Invalid ZIP archive")
        return await self.import_json(payload, options)

    async def import_bundle(
        self, bundle: ExportBundle, options: ImportOptions
    ) -> ImportResult:
        """Recreate the bundle's comments, remapping their reply structure.

        Comments are imported oldest first, top-level comments before
        replies. Replies are then swept repeatedly, each sweep importing
        those whose parent is already mapped. A reply also waits for its
        reply target when that target is still queued in the bundle, unless
        a sweep would otherwise make no progress. Replies still unmapped
        after the last sweep are reported as failures.
        """
        with logfire.span(
            "transfer_service.import_bundle",
            total=len(bundle.comments),
            skip_existing=options.skip_existing,
        ):
            result = ImportResult(total_count=len(bundle.comments))
            id_map: dict[str, CommentId] = {}

            ordered = sorted(bundle.comments, key=_oldest_first)
            roots = [item for item in ordered if not item.parent_id]
            children = [item for item in ordered if item.parent_id]

            for item in roots:
                await self._import_one(item, id_map, options, result)

            queued = {item.id for item in children}
            for _ in range(MAX_IMPORT_SWEEPS):
                if not children:
                    break
                children = await self._sweep(children, queued, id_map, options, result)

            for item in children:
                result.failed_count += 1
                result.errors.append(
                    f"cannot import comment {item.id}: parent {item.parent_id} not found"
                )

            logfire.info(
                "Comment import finished",
                total=result.total_count,
                success=result.success_count,
                skipped=result.skipped_count,
                failed=result.failed_count,
            )
            return result

    async def _sweep(
        self,
        children: list[ExportCommentItem],
        queued: set[str],
        id_map: dict[str, CommentId],
        options: ImportOptions,
        result: ImportResult,
    ) -> list[ExportCommentItem]:
        """Import every reply that can be placed now; return the rest."""

        def waiting_on_target(item: ExportCommentItem) -> bool:
            return item.reply_to_id != item.id and item.reply_to_id in queued

        remaining: list[ExportCommentItem] = []
        deferred: list[ExportCommentItem] = []
        for item in children:
            if item.parent_id not in id_map:
                remaining.append(item)
            elif waiting_on_target(item):
                deferred.append(item)
            else:
                await self._import_one(item, id_map, options, result)
                queued.discard(item.id)

        # Retry replies whose targets were placed earlier in this sweep
        progressed = len(remaining) + len(deferred) < len(children)
        still_deferred: list[ExportCommentItem] = []
        for item in deferred:
            if waiting_on_target(item) and progressed:
                still_deferred.append(item)
                continue
            await self._import_one(item, id_map, options, result)
            queued.discard(item.id)

        return sorted(remaining + still_deferred, key=_oldest_first)

    async def _import_one(
        self,
        item: ExportCommentItem,
        id_map: dict[str, CommentId],
        options: ImportOptions,
        result: ImportResult,
    ) -> None:
        try:
            existing = await self._find_existing(item) if options.skip_existing else None
            if existing is not None:
                # Replies to a skipped comment attach to the stored copy
                id_map[item.id] = existing.id
                result.skipped_count += 1
                return

            comment = await self._create(item, id_map, options)
        except Exception as e:
            logfire.warn("Comment import failed", item_id=item.id, error=str(e))
            result.failed_count += 1
            result.errors.append(f"failed to import comment {item.id}: {e}")
            return

        id_map[item.id] = comment.id
        result.success_count += 1

    async def _find_existing(self, item: ExportCommentItem) -> Optional[Comment]:
        """Stored comment with the same email, content and path."""
        if not item.email:
            return None
        matches, _ = await self.comment_repository.find_with_conditions(
            CommentFilter(
                page=1,
                page_size=50,
                email=item.email,
                content=item.content,
                target_path=item.target_path,
            )
        )
        for comment in matches:
            if (
                comment.author.email == item.email
                and comment.content == item.content
                and comment.target_path == item.target_path
            ):
                return comment
        return None

    async def _create(
        self,
        item: ExportCommentItem,
        id_map: dict[str, CommentId],
        options: ImportOptions,
    ) -> Comment:
        status = item.status or options.default_status or int(CommentStatus.PENDING)
        try:
            comment_status = CommentStatus(status)
        except ValueError:
            raise ValidationError(f"invalid status {status}")

        # Uploaded HTML is untrusted
        if item.content_html:
            content_html = self.renderer.sanitize_html(item.content_html)
        else:
            content_html = self.renderer.to_html(item.content)
        created_at = item.created_at if options.keep_create_time else None
        updated_at = item.updated_at if options.keep_create_time else None

        comment = await self.comment_repository.create(
            NewComment(
                target_path=item.target_path,
                target_title=item.target_title or None,
                parent_id=id_map.get(item.parent_id) if item.parent_id else None,
                reply_to_id=id_map.get(item.reply_to_id) if item.reply_to_id else None,
                author=CommentAuthor(
                    nickname=item.nickname,
                    email=item.email or None,
                    website=item.website or None,
                    ip_address=item.ip_address,
                    ip_location=item.ip_location,
                    user_agent=item.user_agent,
                ),
                email_md5=email_digest(item.email),
                content=item.content,
                content_html=content_html,
                status=comment_status,
                is_admin_author=item.is_admin_comment,
                is_anonymous=item.is_anonymous,
                like_count=item.like_count,
                created_at=created_at,
                updated_at=updated_at,
            )
        )

        pinned_at = parse_pin_time(item.pinned_at)
        if pinned_at is not None:
            comment = await self.comment_repository.set_pin(comment.id, pinned_at)
        return comment
