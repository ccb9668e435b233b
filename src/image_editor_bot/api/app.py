"""FastAPI application factory."""

import logging
import os
import signal
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from image_editor_bot.api.telegram_models import TelegramUpdate
from image_editor_bot.app_logging import configure_logging
from image_editor_bot.config import parse_allowed_user_ids
from image_editor_bot.containers import AppContainer
from image_editor_bot.domain.errors import TransportError
from image_editor_bot.services import replies
from image_editor_bot.services.conversation import DocumentUpload
from image_editor_bot.telegram_commands import (
    CHAT_MENU_BUTTON,
    parse_command,
    telegram_commands,
)

_SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def create_app(
    container: AppContainer, on_fatal: Callable[[], None] | None = None
) -> FastAPI:
    """Create a FastAPI app configured with dependencies.

    ``on_fatal`` is invoked when processing an update raises an exception
    nothing below the webhook handled; it defaults to asking the serving
    process to shut down.
    """
    configure_logging()
    logger = logging.getLogger(__name__)
    allowed_user_ids = parse_allowed_user_ids(
        container.settings.telegram_allowed_user_ids
    )
    request_shutdown = on_fatal or _request_shutdown

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings = app.state.container.settings
        telegram_client = app.state.container.telegram_client
        try:
            await telegram_client.set_my_commands(telegram_commands())
            await telegram_client.set_chat_menu_button(CHAT_MENU_BUTTON)
            if settings.telegram_webhook_url:
                await telegram_client.set_webhook(
                    settings.telegram_webhook_url, settings.telegram_webhook_secret
                )
        except Exception:
            logger.exception("Failed to sync Telegram bot settings")
        logger.info("Telegram Image Editor Bot started")
        yield
        logger.info("Shutting down gracefully")
        app.state.healthy = False
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.state.healthy = True

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        """Report liveness with uptime and counters."""
        stats = request.app.state.container.stats
        healthy = request.app.state.healthy
        return JSONResponse(
            {
                "status": "healthy" if healthy else "unhealthy",
                "uptime": stats.uptime_seconds(),
                "stats": stats.snapshot(),
            },
            status_code=200 if healthy else 503,
        )

    @app.get("/metrics")
    async def metrics(request: Request) -> dict[str, object]:
        """Expose processing counters."""
        return request.app.state.container.stats.snapshot()

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request, background_tasks: BackgroundTasks
    ) -> dict[str, str]:
        """Accept a Telegram update and process it after responding."""
        secret = request.app.state.container.settings.telegram_webhook_secret
        if secret and request.headers.get(_SECRET_HEADER) != secret:
            raise HTTPException(status_code=403, detail="Invalid secret token")
        background_tasks.add_task(process_update, request.app, update)
        return {"status": "ok"}

    async def process_update(app: FastAPI, update: TelegramUpdate) -> None:
        try:
            await dispatch_update(app.state.container, update, allowed_user_ids)
        except TransportError:
            logger.exception(
                "Failed to reach Telegram", extra={"update_id": update.update_id}
            )
        except Exception:
            logger.exception(
                "Unhandled error while processing update",
                extra={"update_id": update.update_id},
            )
            app.state.healthy = False
            request_shutdown()

    return app


async def dispatch_update(  # noqa: PLR0911, PLR0912
    container: AppContainer, update: TelegramUpdate, allowed_user_ids: set[int] | None
) -> None:
    """Route a Telegram update to the menu or the conversation controller."""
    telegram_client = container.telegram_client
    controller = container.controller
    menu = container.menu_handler

    if update.callback_query:
        callback = update.callback_query
        if not _is_user_allowed(callback.from_user.id, allowed_user_ids):
            await telegram_client.answer_callback_query(
                callback.id, text="Not authorized."
            )
            return
        await telegram_client.answer_callback_query(callback.id)
        if callback.data and callback.message:
            await menu.handle_callback(
                callback.from_user.id, callback.message.chat.id, callback.data
            )
        return

    message = update.message
    if message is None or message.from_user is None:
        return
    user_id = message.from_user.id
    chat_id = message.chat.id
    if not _is_user_allowed(user_id, allowed_user_ids):
        await telegram_client.send_message(
            chat_id=chat_id, text=replies.PRIVATE_BOT_TEXT
        )
        return

    if message.document:
        document = message.document
        await controller.handle_document(
            user_id,
            chat_id,
            DocumentUpload(
                file_id=document.file_id,
                mime_type=document.mime_type,
                file_size=document.file_size,
                file_name=document.file_name,
            ),
        )
        return
    if message.photo:
        await controller.handle_photo(chat_id)
        return
    if not message.text:
        return

    text = message.text
    command = parse_command(text)
    if command == "start":
        await menu.start(chat_id)
    elif command == "help":
        await menu.help(chat_id)
    elif command == "cancel" or text == replies.CANCEL_BUTTON:
        await controller.handle_cancel(user_id, chat_id)
    elif text == replies.UPLOAD_BUTTON:
        await menu.upload_hint(chat_id)
    elif command is not None:
        await menu.help(chat_id)
    else:
        await controller.handle_text(user_id, chat_id, text)


def _is_user_allowed(user_id: int, allowed: set[int] | None) -> bool:
    """Return true when the user is allowed to interact with the bot."""
    return allowed is None or user_id in allowed


def _request_shutdown() -> None:
    """Ask the serving process to stop accepting updates and exit."""
    os.kill(os.getpid(), signal.SIGTERM)
