"""Domain models for downloaded media and edit results."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MediaFile:
    """Binary file fetched from Telegram."""

    data: bytes
    content_type: str
    file_name: str


@dataclass(frozen=True)
class EditResult:
    """Edited image returned by the model."""

    data: bytes
    media_type: str
