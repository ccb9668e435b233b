"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from image_editor_bot.adapters.openrouter_client import OpenRouterCompletionClient
from image_editor_bot.adapters.telegram_client import (
    HttpxTelegramClient,
    TelegramClient,
)
from image_editor_bot.adapters.telegram_file_client import HttpxTelegramFileClient
from image_editor_bot.config import Settings
from image_editor_bot.services.commands import MenuHandler
from image_editor_bot.services.conversation import ConversationController
from image_editor_bot.services.editing import (
    DEFAULT_SYSTEM_DIRECTIVE,
    ImageEditService,
    RetryPolicy,
)
from image_editor_bot.services.media import MediaFetcher
from image_editor_bot.services.sessions import InMemorySessionStore, SessionStore
from image_editor_bot.services.stats import BotStats


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    telegram_client: TelegramClient
    session_store: SessionStore
    controller: ConversationController
    menu_handler: MenuHandler
    stats: BotStats
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    telegram_client = HttpxTelegramClient.create(resolved_settings.telegram_bot_token)
    telegram_file_client = HttpxTelegramFileClient.create(
        resolved_settings.telegram_bot_token
    )
    completion_client = OpenRouterCompletionClient.create(
        api_key=resolved_settings.openrouter_api_key,
        base_url=resolved_settings.openrouter_base_url,
        timeout_seconds=resolved_settings.edit_timeout_seconds,
        referer=resolved_settings.openrouter_referer,
        title=resolved_settings.openrouter_title,
        google_api_key=resolved_settings.google_api_key,
    )
    edit_service = ImageEditService(
        client=completion_client,
        model=resolved_settings.openrouter_model,
        system_directive=(
            DEFAULT_SYSTEM_DIRECTIVE
            if resolved_settings.edit_system_directive_enabled
            else None
        ),
        retry_policy=RetryPolicy(max_attempts=resolved_settings.edit_max_attempts),
    )
    media_fetcher = MediaFetcher(
        file_client=telegram_file_client,
        timeout_seconds=resolved_settings.download_timeout_seconds,
    )
    session_store = InMemorySessionStore(
        idle_ttl_seconds=resolved_settings.session_idle_ttl_seconds
    )
    stats = BotStats()
    controller = ConversationController(
        telegram_client=telegram_client,
        media_fetcher=media_fetcher,
        edit_service=edit_service,
        session_store=session_store,
        stats=stats,
    )
    menu_handler = MenuHandler(telegram_client=telegram_client, controller=controller)

    async def close_resources() -> None:
        await telegram_client.close()
        await telegram_file_client.close()
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        telegram_client=telegram_client,
        session_store=session_store,
        controller=controller,
        menu_handler=menu_handler,
        stats=stats,
        close_resources=close_resources,
    )
