"""Process entrypoint: load settings and serve the webhook app."""

import logging

import uvicorn
from pydantic import ValidationError

from image_editor_bot.api.app import create_app
from image_editor_bot.app_logging import configure_logging
from image_editor_bot.config import Settings
from image_editor_bot.containers import build_container

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the bot, exiting early when credentials are missing."""
    configure_logging()
    try:
        settings = Settings()
    except ValidationError:
        logger.exception("TELEGRAM_BOT_TOKEN and OPENROUTER_API_KEY must be set")
        raise SystemExit(1) from None

    logger.info(
        "Starting Telegram Image Editor Bot",
        extra={"model": settings.openrouter_model},
    )
    if settings.google_api_key:
        logger.info("BYOK enabled for Google models")
    app = create_app(build_container(settings))
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
