"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    telegram_bot_token: str
    telegram_allowed_user_ids: str | None = None
    telegram_webhook_url: str | None = None
    telegram_webhook_secret: str | None = None
    openrouter_api_key: str
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "google/gemini-2.5-flash-image"
    openrouter_referer: str | None = None
    openrouter_title: str | None = "Telegram Image Editor Bot"
    google_api_key: str | None = None
    edit_timeout_seconds: float = 120.0
    edit_max_attempts: int = 3
    edit_system_directive_enabled: bool = True
    download_timeout_seconds: float = 30.0
    session_idle_ttl_seconds: int | None = 3600
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3000
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_allowed_user_ids(raw: str | None) -> set[int] | None:
    """Parse allowed Telegram user IDs from env."""
    if raw is None:
        return None
    cleaned = raw.strip()
    if cleaned in {"", "*"}:
        return None
    ids: set[int] = set()
    for chunk in cleaned.split(","):
        value = chunk.strip()
        if not value:
            continue
        if value.isdigit():
            ids.add(int(value))
    return ids or None
