"""Telegram API client adapter."""

import json
from dataclasses import dataclass
from typing import Protocol

import httpx

from image_editor_bot.domain.errors import TransportError


class TelegramClient(Protocol):
    """Interface for Telegram API interactions."""

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> int:
        """Send a text message and return its message id."""

    async def send_document(  # noqa: PLR0913
        self,
        chat_id: int,
        content: bytes,
        filename: str,
        content_type: str,
        caption: str | None = None,
        reply_markup: dict | None = None,
    ) -> None:
        """Send a binary file as a document."""

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        """Delete a previously sent message."""

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        """Answer a Telegram callback query."""

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        """Set the chat menu button."""

    async def set_webhook(self, url: str, secret_token: str | None = None) -> None:
        """Register the webhook URL for updates."""


@dataclass
class HttpxTelegramClient:
    """Telegram client implemented with httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramClient":
        """Create a Telegram client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    def _url(self, method: str) -> str:
        return f"https://api.telegram.org/bot{self.bot_token}/{method}"

    async def _post(
        self, method: str, timeout: float = 10, **kwargs: object
    ) -> dict:
        try:
            response = await self.http_client.post(
                self._url(method), timeout=timeout, **kwargs
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"Telegram {method} failed: {exc}") from exc
        return response.json()

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> int:
        """Send a message using Telegram's sendMessage API."""
        payload: dict[str, object] = {"chat_id": chat_id, "text": text}
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        body = await self._post("sendMessage", json=payload)
        return int(body.get("result", {}).get("message_id", 0))

    async def send_document(  # noqa: PLR0913
        self,
        chat_id: int,
        content: bytes,
        filename: str,
        content_type: str,
        caption: str | None = None,
        reply_markup: dict | None = None,
    ) -> None:
        """Upload a document using multipart sendDocument."""
        data: dict[str, str] = {"chat_id": str(chat_id)}
        if caption is not None:
            data["caption"] = caption
        if reply_markup is not None:
            data["reply_markup"] = json.dumps(reply_markup)
        await self._post(
            "sendDocument",
            data=data,
            files={"document": (filename, content, content_type)},
            timeout=60,
        )

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        """Delete a message using Telegram's deleteMessage API."""
        await self._post(
            "deleteMessage", json={"chat_id": chat_id, "message_id": message_id}
        )

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        """Answer a callback query using Telegram's API."""
        payload: dict[str, object] = {"callback_query_id": callback_query_id}
        if text is not None:
            payload["text"] = text
        await self._post("answerCallbackQuery", json=payload)

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        """Set the bot command list."""
        await self._post("setMyCommands", json={"commands": commands})

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        """Set the chat menu button."""
        await self._post(
            "setChatMenuButton",
            json={"menu_button": menu_button or {"type": "commands"}},
        )

    async def set_webhook(self, url: str, secret_token: str | None = None) -> None:
        """Point Telegram updates at the webhook URL."""
        payload: dict[str, object] = {"url": url}
        if secret_token is not None:
            payload["secret_token"] = secret_token
        await self._post("setWebhook", json=payload)
