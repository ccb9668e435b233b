"""Domain models for pending edit sessions."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Session:
    """A single uploaded image waiting for an edit instruction."""

    image_data: bytes
    content_type: str
    original_name: str
