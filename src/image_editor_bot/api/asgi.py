"""ASGI entrypoint for the image editor bot."""

from image_editor_bot.api.app import create_app
from image_editor_bot.containers import build_container

app = create_app(build_container())
