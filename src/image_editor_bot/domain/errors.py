"""Error taxonomy for the image editing pipeline."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from image_editor_bot.services.classifier import Outcome


class ImageEditorError(Exception):
    """Base class for per-request failures."""


class ValidationError(ImageEditorError):
    """Uploaded file was rejected before download."""


class ResolutionError(ImageEditorError):
    """Telegram did not return a path for a file id."""


class DownloadError(ImageEditorError):
    """Fetching a file from Telegram failed."""


class UpstreamCallError(ImageEditorError):
    """Raw failure of a single call to the completion API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UpstreamError(ImageEditorError):
    """Classified failure of the completion API."""

    def __init__(self, outcome: "Outcome") -> None:
        super().__init__(outcome.user_message)
        self.outcome = outcome


class ExtractionError(ImageEditorError):
    """Completion succeeded but carried no usable image."""


class NoImageError(ExtractionError):
    """Response has no images list or it is empty."""


class MalformedImageError(ExtractionError):
    """First image entry cannot be decoded."""


class MissingImageUrlError(MalformedImageError):
    """Image entry lacks an image_url.url string."""


class UnsupportedImageSchemeError(MalformedImageError):
    """Image URL is not a data URI."""


class InvalidDataUriError(MalformedImageError):
    """Data URI does not match data:<type>;base64,<payload>."""


class TransportError(ImageEditorError):
    """Outbound Telegram call failed."""
