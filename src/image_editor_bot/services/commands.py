"""Static menu, help and inline button handling."""

import logging
from dataclasses import dataclass

from image_editor_bot.adapters.telegram_client import TelegramClient
from image_editor_bot.services import replies
from image_editor_bot.services.conversation import ConversationController

logger = logging.getLogger(__name__)


@dataclass
class MenuHandler:
    """Handle /start, /help and inline keyboard callbacks."""

    telegram_client: TelegramClient
    controller: ConversationController

    async def start(self, chat_id: int) -> None:
        """Send the welcome message with the main keyboards."""
        await self.telegram_client.send_message(
            chat_id=chat_id,
            text=replies.WELCOME_TEXT,
            reply_markup=replies.MAIN_REPLY_KEYBOARD,
            parse_mode="Markdown",
        )
        await self.telegram_client.send_message(
            chat_id=chat_id,
            text=replies.NEXT_STEP_TEXT,
            reply_markup=replies.MAIN_INLINE_KEYBOARD,
        )

    async def help(self, chat_id: int) -> None:
        """Send usage help."""
        await self.telegram_client.send_message(
            chat_id=chat_id, text=replies.HELP_TEXT, parse_mode="Markdown"
        )

    async def upload_hint(self, chat_id: int) -> None:
        """Explain how to upload an image."""
        await self.telegram_client.send_message(
            chat_id=chat_id,
            text=replies.UPLOAD_HINT_TEXT,
            reply_markup=replies.EDITING_REPLY_KEYBOARD,
        )

    async def handle_callback(self, user_id: int, chat_id: int, data: str) -> None:
        """Dispatch an inline button press."""
        if data == "examples":
            await self.telegram_client.send_message(
                chat_id=chat_id, text=replies.EXAMPLES_TEXT, parse_mode="Markdown"
            )
        elif data == "help":
            await self.help(chat_id)
        elif data == "help_document":
            await self.telegram_client.send_message(
                chat_id=chat_id, text=replies.HELP_DOCUMENT_TEXT, parse_mode="Markdown"
            )
        elif data == "upload_new":
            await self.controller.handle_upload_new(user_id, chat_id)
        elif data == "try_again":
            await self.telegram_client.send_message(
                chat_id=chat_id,
                text=replies.TRY_AGAIN_TEXT,
                reply_markup=replies.EDITING_REPLY_KEYBOARD,
            )
        elif data == "cancel_operation":
            await self.controller.handle_cancel(user_id, chat_id)
        elif data == "main_menu":
            await self.start(chat_id)
        else:
            logger.info("Ignoring unknown callback", extra={"data": data})
