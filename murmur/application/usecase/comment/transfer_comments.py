"""Comment export and import use cases."""

from pydantic import BaseModel

from murmur.domain.error import ValidationError
from murmur.domain.model import ExportBundle, ImportOptions, ImportResult
from murmur.domain.service import CommentTransferService
from murmur.util.ids import IdCodec

from .common import decode_comment_ids

EXPORT_ZIP_MEDIA_TYPE = "application/zip"


class ExportCommentsRequest(BaseModel):
    """Public ids to export; empty exports everything."""

    ids: list[str] = []


class ImportCommentsRequest(BaseModel):
    filename: str
    data: bytes
    options: ImportOptions = ImportOptions()


class ExportCommentsUseCase:
    """Use case for downloading comments as JSON or a ZIP archive."""

    def __init__(
        self, transfer_service: CommentTransferService, id_codec: IdCodec
    ) -> None:
        self.transfer_service = transfer_service
        self.id_codec = id_codec

    async def execute(self, request: ExportCommentsRequest) -> ExportBundle:
        """Export as a JSON bundle.

        Raises:
            ValidationError: If ids were given but none of them is valid
        """
        if not request.ids:
            return await self.transfer_service.export_all()
        comment_ids = decode_comment_ids(self.id_codec, request.ids)
        if not comment_ids:
            raise ValidationError("No valid comment ids to export")
        return await self.transfer_service.export(comment_ids)

    async def export_zip(self, request: ExportCommentsRequest) -> bytes:
        comment_ids = decode_comment_ids(self.id_codec, request.ids)
        if request.ids and not comment_ids:
            raise ValidationError("No valid comment ids to export")
        return await self.transfer_service.export_zip(comment_ids)


class ImportCommentsUseCase:
    """Use case for uploading a JSON bundle or an export ZIP archive."""

    def __init__(self, transfer_service: CommentTransferService) -> None:
        self.transfer_service = transfer_service

    async def execute(self, request: ImportCommentsRequest) -> ImportResult:
        """Import by file type (``.zip`` or ``.json``).

        Raises:
            ValidationError: Unsupported file type or unreadable content
        """
        name = request.filename.lower()
        if name.endswith(".zip"):
            return await self.transfer_service.import_zip(
                request.data, request.options
            )
        if name.endswith(".json"):
            return await self.transfer_service.import_json(
                request.data, request.options
            )
        raise ValidationError("Unsupported file type, upload a .json or .zip file")
