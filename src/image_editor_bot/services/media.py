"""Fetch uploaded images from Telegram."""

import logging
import posixpath
from dataclasses import dataclass

from image_editor_bot.adapters.telegram_file_client import TelegramFileClient
from image_editor_bot.domain.edits import MediaFile
from image_editor_bot.domain.errors import DownloadError, ResolutionError

logger = logging.getLogger(__name__)

_CONTENT_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}
DEFAULT_CONTENT_TYPE = "image/jpeg"


def content_type_for(file_name: str) -> str:
    """Infer an image content type from the file extension."""
    _, ext = posixpath.splitext(file_name)
    return _CONTENT_TYPES.get(ext.lower(), DEFAULT_CONTENT_TYPE)


@dataclass
class MediaFetcher:
    """Resolve Telegram file ids and download their bytes."""

    file_client: TelegramFileClient
    timeout_seconds: float = 30.0

    async def fetch(self, file_id: str) -> MediaFile:
        """Download a file and describe it."""
        try:
            file_path = await self.file_client.get_file_path(file_id)
            if not file_path:
                raise ResolutionError("Telegram returned no file path")
            data = await self.file_client.download(file_path, self.timeout_seconds)
        except Exception as exc:
            logger.exception("Error downloading file", extra={"file_id": file_id})
            raise DownloadError(f"Failed to download file: {exc}") from exc

        file_name = posixpath.basename(file_path)
        logger.info(
            "Image downloaded", extra={"file_name": file_name, "size": len(data)}
        )
        return MediaFile(
            data=data, content_type=content_type_for(file_name), file_name=file_name
        )
