"""Tests for Telegram webhook handling."""

from fastapi.testclient import TestClient

from image_editor_bot.api.app import create_app
from image_editor_bot.config import Settings
from image_editor_bot.containers import AppContainer
from image_editor_bot.services import replies
from image_editor_bot.services.sessions import InMemorySessionStore
from tests.conftest import FakeTelegramClient

USER = {"id": 123, "is_bot": False, "first_name": "Test"}
CHAT = {"id": 99, "type": "private"}


def _message(update_id: int, **fields: object) -> dict[str, object]:
    return {
        "update_id": update_id,
        "message": {
            "message_id": update_id * 10,
            "date": 1700000000 + update_id,
            "chat": CHAT,
            "from": USER,
            **fields,
        },
    }


def _callback(update_id: int, data: str) -> dict[str, object]:
    return {
        "update_id": update_id,
        "callback_query": {
            "id": f"cbq-{update_id}",
            "from": USER,
            "message": {
                "message_id": 5,
                "date": 1700000000,
                "chat": CHAT,
                "from": USER,
                "text": "menu",
            },
            "data": data,
        },
    }


_DOCUMENT = {
    "file_id": "doc-id",
    "file_unique_id": "doc-unique",
    "file_name": "contract.png",
    "mime_type": "image/png",
    "file_size": 2048,
}


def test_health_reports_counters(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["stats"]["requests_processed"] == 0
    assert client.get("/metrics").json()["errors_count"] == 0


def test_start_sends_welcome(
    container: AppContainer, telegram_client: FakeTelegramClient
) -> None:
    client = TestClient(create_app(container))

    response = client.post("/telegram/webhook", json=_message(1, text="/start"))

    assert response.status_code == 200
    assert telegram_client.messages[0] == (99, replies.WELCOME_TEXT)


def test_document_then_text_round_trip(
    container: AppContainer,
    telegram_client: FakeTelegramClient,
    session_store: InMemorySessionStore,
) -> None:
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_message(2, document=_DOCUMENT))
    assert session_store.get(123) is not None

    client.post("/telegram/webhook", json=_message(3, text="Make the sky purple"))

    assert session_store.get(123) is None
    assert telegram_client.documents[0][1] == "edited_contract.png"
    assert client.get("/metrics").json()["requests_processed"] == 1


def test_photo_asks_for_document(
    container: AppContainer, telegram_client: FakeTelegramClient
) -> None:
    client = TestClient(create_app(container))
    photo = [{"file_id": "p", "file_unique_id": "pu", "width": 64, "height": 64}]

    client.post("/telegram/webhook", json=_message(4, photo=photo))

    assert telegram_client.last_text == replies.PHOTO_WARNING_TEXT


def test_cancel_command_and_button(
    container: AppContainer, telegram_client: FakeTelegramClient
) -> None:
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_message(5, document=_DOCUMENT))
    client.post("/telegram/webhook", json=_message(6, text="/cancel"))
    assert telegram_client.last_text == replies.CANCELLED_TEXT

    client.post("/telegram/webhook", json=_message(7, text=replies.CANCEL_BUTTON))
    assert telegram_client.last_text == replies.NOTHING_TO_CANCEL_TEXT


def test_unknown_command_shows_help(
    container: AppContainer, telegram_client: FakeTelegramClient
) -> None:
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_message(8, text="/whatever"))

    assert telegram_client.last_text == replies.HELP_TEXT


def test_text_without_image(
    container: AppContainer, telegram_client: FakeTelegramClient
) -> None:
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_message(9, text="Remove the logo"))

    assert telegram_client.last_text == replies.NO_IMAGE_TEXT


def test_callbacks_are_answered_and_routed(
    container: AppContainer,
    telegram_client: FakeTelegramClient,
    session_store: InMemorySessionStore,
) -> None:
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_callback(10, "examples"))
    assert telegram_client.callbacks == [("cbq-10", None)]
    assert telegram_client.last_text == replies.EXAMPLES_TEXT

    client.post("/telegram/webhook", json=_message(11, document=_DOCUMENT))
    client.post("/telegram/webhook", json=_callback(12, "cancel_operation"))
    assert session_store.get(123) is None
    assert telegram_client.last_text == replies.CANCELLED_TEXT


def test_private_bot_rejects_unknown_users(
    container: AppContainer, telegram_client: FakeTelegramClient
) -> None:
    container.settings.telegram_allowed_user_ids = "1,2"
    client = TestClient(create_app(container))

    client.post("/telegram/webhook", json=_message(13, text="/start"))
    client.post("/telegram/webhook", json=_callback(14, "examples"))

    assert telegram_client.messages == [(99, replies.PRIVATE_BOT_TEXT)]
    assert telegram_client.callbacks == [("cbq-14", "Not authorized.")]


def test_secret_token_is_enforced(container: AppContainer) -> None:
    container.settings.telegram_webhook_secret = "s3cret"
    client = TestClient(create_app(container))

    rejected = client.post("/telegram/webhook", json=_message(15, text="/start"))
    accepted = client.post(
        "/telegram/webhook",
        json=_message(16, text="/start"),
        headers={"X-Telegram-Bot-Api-Secret-Token": "s3cret"},
    )

    assert rejected.status_code == 403
    assert accepted.status_code == 200


def test_unhandled_error_requests_shutdown(
    container: AppContainer, settings: Settings
) -> None:
    shutdowns: list[bool] = []

    async def explode(chat_id: int) -> None:
        raise RuntimeError("bug")

    container.menu_handler.start = explode  # type: ignore[method-assign]
    client = TestClient(create_app(container, on_fatal=lambda: shutdowns.append(True)))

    response = client.post("/telegram/webhook", json=_message(17, text="/start"))

    assert response.status_code == 200
    assert shutdowns == [True]
    assert client.get("/health").status_code == 503


def test_lifespan_registers_commands(
    container: AppContainer, telegram_client: FakeTelegramClient
) -> None:
    container.settings.telegram_webhook_url = "https://bot.test/telegram/webhook"

    with TestClient(create_app(container)):
        pass

    assert telegram_client.commands is not None
    assert telegram_client.menu_button == {"type": "commands"}
    assert telegram_client.webhook == ("https://bot.test/telegram/webhook", None)
