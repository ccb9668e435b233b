"""Shared test fixtures."""

import asyncio
import base64
from dataclasses import dataclass, field

import pytest
from tenacity import wait_none

from image_editor_bot.adapters.telegram_client import TelegramClient
from image_editor_bot.adapters.telegram_file_client import TelegramFileClient
from image_editor_bot.config import Settings
from image_editor_bot.containers import AppContainer
from image_editor_bot.domain.errors import TransportError
from image_editor_bot.services.commands import MenuHandler
from image_editor_bot.services.conversation import ConversationController
from image_editor_bot.services.editing import (
    CompletionClient,
    ImageEditService,
    RetryPolicy,
)
from image_editor_bot.services.media import MediaFetcher
from image_editor_bot.services.sessions import InMemorySessionStore
from image_editor_bot.services.stats import BotStats

EDITED_BYTES = b"\x89PNG\r\n\x1a\nedited-image"


def completion_body(
    data: bytes = EDITED_BYTES, media_type: str = "image/png"
) -> dict[str, object]:
    """Build a chat completion body carrying one inline image."""
    encoded = base64.b64encode(data).decode("ascii")
    return {
        "model": "google/gemini-2.5-flash-image",
        "choices": [
            {
                "message": {
                    "role": "assistant",
                    "content": "",
                    "images": [
                        {
                            "type": "image_url",
                            "image_url": {"url": f"data:{media_type};base64,{encoded}"},
                        }
                    ],
                }
            }
        ],
        "usage": {"prompt_tokens": 10, "completion_tokens": 20},
    }


@dataclass
class FakeTelegramClient(TelegramClient):
    """Fake Telegram client that records outbound calls."""

    messages: list[tuple[int, str]] = field(default_factory=list)
    markups: list[dict | None] = field(default_factory=list)
    documents: list[tuple[int, str, str, bytes]] = field(default_factory=list)
    deleted: list[tuple[int, int]] = field(default_factory=list)
    callbacks: list[tuple[str, str | None]] = field(default_factory=list)
    commands: list[dict[str, str]] | None = None
    menu_button: dict[str, object] | None = None
    webhook: tuple[str, str | None] | None = None
    fail_documents: bool = False
    fail_deletes: bool = False
    _next_id: int = 1000

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> int:
        self.messages.append((chat_id, text))
        self.markups.append(reply_markup)
        self._next_id += 1
        return self._next_id

    async def send_document(  # noqa: PLR0913
        self,
        chat_id: int,
        content: bytes,
        filename: str,
        content_type: str,
        caption: str | None = None,
        reply_markup: dict | None = None,
    ) -> None:
        if self.fail_documents:
            raise TransportError("Telegram sendDocument failed: boom")
        self.documents.append((chat_id, filename, content_type, content))

    async def delete_message(self, chat_id: int, message_id: int) -> None:
        if self.fail_deletes:
            raise TransportError("Telegram deleteMessage failed")
        self.deleted.append((chat_id, message_id))

    async def answer_callback_query(
        self, callback_query_id: str, text: str | None = None
    ) -> None:
        self.callbacks.append((callback_query_id, text))

    async def set_my_commands(self, commands: list[dict[str, str]]) -> None:
        self.commands = commands

    async def set_chat_menu_button(
        self, menu_button: dict[str, object] | None = None
    ) -> None:
        self.menu_button = menu_button

    async def set_webhook(self, url: str, secret_token: str | None = None) -> None:
        self.webhook = (url, secret_token)

    @property
    def last_text(self) -> str:
        return self.messages[-1][1]


@dataclass
class FakeTelegramFileClient(TelegramFileClient):
    """Fake Telegram file client returning static bytes."""

    file_path: str | None = "documents/file_7.png"
    content: bytes = b"original-image-bytes"
    error: Exception | None = None
    timeouts: list[float] = field(default_factory=list)

    async def get_file_path(self, file_id: str) -> str | None:
        return self.file_path

    async def download(self, file_path: str, timeout: float) -> bytes:
        self.timeouts.append(timeout)
        if self.error is not None:
            raise self.error
        return self.content


@dataclass
class FakeCompletionClient(CompletionClient):
    """Fake completion client replaying queued results.

    Each queued item is either a response body or an exception to raise.
    Once the queue is empty a default body with an edited image is returned.
    """

    queue: list[object] = field(default_factory=list)
    calls: list[list[dict[str, object]]] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def complete(
        self, *, model: str, messages: list[dict[str, object]]
    ) -> dict[str, object]:
        self.calls.append(messages)
        if self.gate is not None:
            await self.gate.wait()
        if not self.queue:
            return completion_body()
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


NO_WAIT_RETRY = RetryPolicy(max_attempts=3, wait=wait_none())


@pytest.fixture
def settings() -> Settings:
    return Settings(
        telegram_bot_token="test-token",
        openrouter_api_key="openrouter-key",
    )


@pytest.fixture
def telegram_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def file_client() -> FakeTelegramFileClient:
    return FakeTelegramFileClient()


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def controller(
    telegram_client: FakeTelegramClient,
    file_client: FakeTelegramFileClient,
    completion_client: FakeCompletionClient,
    session_store: InMemorySessionStore,
) -> ConversationController:
    return ConversationController(
        telegram_client=telegram_client,
        media_fetcher=MediaFetcher(file_client=file_client),
        edit_service=ImageEditService(
            client=completion_client,
            model="google/gemini-2.5-flash-image",
            retry_policy=NO_WAIT_RETRY,
        ),
        session_store=session_store,
    )


@pytest.fixture
def container(
    settings: Settings,
    telegram_client: FakeTelegramClient,
    session_store: InMemorySessionStore,
    controller: ConversationController,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        telegram_client=telegram_client,
        session_store=session_store,
        controller=controller,
        menu_handler=MenuHandler(telegram_client=telegram_client, controller=controller),
        stats=controller.stats,
        close_resources=close_resources,
    )


@pytest.fixture
def stats(controller: ConversationController) -> BotStats:
    return controller.stats
