"""Signed download links for stored files."""

import base64
import hashlib
import hmac
import time
from collections.abc import Callable
from datetime import timedelta

from murmur.adapter.error import ProviderError
from murmur.application.usecase.comment.presenter import FileService
from murmur.util.error import InvalidPublicIdError
from murmur.util.ids import EntityType, IdCodec


def sign(secret: str, public_file_id: str, expires: int) -> str:
    """URL-safe base64 HMAC-SHA256 of ``"<id>:<expires>"``."""
    mac = hmac.new(
        secret.encode("utf-8"),
        f"{public_file_id}:{expires}".encode("utf-8"),
        hashlib.sha256,
    )
    return base64.urlsafe_b64encode(mac.digest()).decode("ascii")


class SignedFileUrlService(FileService):
    """Builds expiring download links checked by the file download endpoint."""

    def __init__(
        self,
        signing_secret: str,
        id_codec: IdCodec,
        download_prefix: str = "/needcache/download",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.signing_secret = signing_secret
        self.id_codec = id_codec
        self.download_prefix = download_prefix.rstrip("/")
        self.clock = clock

    async def get_download_url(self, public_file_id: str, expires_in: timedelta) -> str:
        """Signed URL for a stored file.

        Raises:
            ProviderError: If no signing secret is configured
            InvalidPublicIdError: If the id is not a file id
        """
        if not self.signing_secret:
            raise ProviderError("File signing secret is not configured")
        _, entity_type = self.id_codec.decode(public_file_id)
        if entity_type != EntityType.FILE:
            raise InvalidPublicIdError(f"Not a file id: {public_file_id!r}")

        expires = int(self.clock() + expires_in.total_seconds())
        signature = sign(self.signing_secret, public_file_id, expires)
        return (
            f"{self.download_prefix}/{public_file_id}"
            f"?expires={expires}&sign={signature}"
        )
