"""Telegram file download client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from image_editor_bot.domain.errors import ResolutionError


class TelegramFileClient(Protocol):
    """Interface for downloading Telegram files."""

    async def get_file_path(self, file_id: str) -> str | None:
        """Resolve a file id to its download path."""

    async def download(self, file_path: str, timeout: float) -> bytes:
        """Download a resolved file and return its bytes."""


@dataclass
class HttpxTelegramFileClient(TelegramFileClient):
    """Telegram file client using httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramFileClient":
        """Create a Telegram file client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def get_file_path(self, file_id: str) -> str | None:
        """Resolve the file path via getFile."""
        get_file_url = f"https://api.telegram.org/bot{self.bot_token}/getFile"
        response = await self.http_client.get(
            get_file_url, params={"file_id": file_id}, timeout=10
        )
        response.raise_for_status()
        payload = response.json()
        if not payload.get("ok"):
            description = payload.get("description", "unknown error")
            raise ResolutionError(f"Telegram getFile failed: {description}")
        return payload.get("result", {}).get("file_path")

    async def download(self, file_path: str, timeout: float) -> bytes:
        """Download file bytes from the Telegram file endpoint."""
        download_url = f"https://api.telegram.org/file/bot{self.bot_token}/{file_path}"
        file_response = await self.http_client.get(download_url, timeout=timeout)
        file_response.raise_for_status()
        return file_response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
