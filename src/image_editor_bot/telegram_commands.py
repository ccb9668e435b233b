"""Telegram bot command configuration."""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TelegramCommand:
    """Declarative bot command definition."""

    command: str
    description: str


class BotCommand(Enum):
    """Enum of bot commands (single source of truth)."""

    START = TelegramCommand("start", "Main menu and instructions")
    HELP = TelegramCommand("help", "Supported formats and limits")
    CANCEL = TelegramCommand("cancel", "Discard the pending image")


def telegram_commands() -> list[dict[str, str]]:
    """Return commands formatted for Telegram API."""
    return [
        {"command": entry.value.command, "description": entry.value.description}
        for entry in BotCommand
    ]


def parse_command(text: str) -> str | None:
    """Return the command name of a /command message, without bot mention."""
    if not text.startswith("/"):
        return None
    head = text.split(maxsplit=1)[0]
    return head[1:].split("@", maxsplit=1)[0].lower()


CHAT_MENU_BUTTON: dict[str, object] = {"type": "commands"}
