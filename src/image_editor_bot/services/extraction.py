"""Decode edited images from chat completion responses."""

import base64
import binascii
import re
from collections.abc import Mapping

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from image_editor_bot.domain.edits import EditResult
from image_editor_bot.domain.errors import (
    InvalidDataUriError,
    MissingImageUrlError,
    NoImageError,
    UnsupportedImageSchemeError,
)

_DATA_URI = re.compile(r"^data:([^;]+);base64,(.+)$", re.DOTALL)


class _ImageUrl(BaseModel):
    url: str


class _ImageEntry(BaseModel):
    image_url: _ImageUrl


class _Message(BaseModel):
    images: list[object] | None = None


class _Choice(BaseModel):
    message: _Message


class _Completion(BaseModel):
    """Envelope of a chat completion carrying generated images."""

    choices: list[_Choice]


def extract_edit_result(body: Mapping[str, object]) -> EditResult:
    """Return the first embedded image of a completion response.

    The image is expected at ``choices[0].message.images[0].image_url.url``
    as a ``data:<media-type>;base64,<payload>`` URI.
    """
    try:
        completion = _Completion.model_validate(body)
    except SchemaError as exc:
        raise NoImageError("Response does not contain an images list") from exc
    if not completion.choices or not completion.choices[0].message.images:
        raise NoImageError("Image not found in API response")

    try:
        entry = _ImageEntry.model_validate(completion.choices[0].message.images[0])
    except SchemaError as exc:
        raise MissingImageUrlError("Image entry has no image_url") from exc

    url = entry.image_url.url
    if not url.startswith("data:"):
        raise UnsupportedImageSchemeError("Image is not an inline data URI")
    return decode_data_uri(url)


def decode_data_uri(url: str) -> EditResult:
    """Decode a base64 data URI into bytes and its media type."""
    match = _DATA_URI.match(url)
    if match is None:
        raise InvalidDataUriError("Could not extract base64 from data URI")
    media_type, payload = match.groups()
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise InvalidDataUriError("Data URI payload is not valid base64") from exc
    return EditResult(data=data, media_type=media_type)


def to_data_uri(data: bytes, media_type: str) -> str:
    """Encode bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type};base64,{encoded}"
