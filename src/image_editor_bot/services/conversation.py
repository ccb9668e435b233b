"""Conversation state machine: upload an image, then describe the edit."""

import logging
import posixpath
from dataclasses import dataclass, field

from image_editor_bot.adapters.telegram_client import TelegramClient
from image_editor_bot.domain.errors import (
    DownloadError,
    ExtractionError,
    TransportError,
    UpstreamError,
    ValidationError,
)
from image_editor_bot.domain.sessions import Session
from image_editor_bot.services import replies
from image_editor_bot.services.classifier import Outcome, OutcomeKind
from image_editor_bot.services.editing import ImageEditService
from image_editor_bot.services.media import MediaFetcher
from image_editor_bot.services.sessions import SessionStore
from image_editor_bot.services.stats import BotStats

logger = logging.getLogger(__name__)

SUPPORTED_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
MAX_FILE_SIZE = 20 * 1024 * 1024


@dataclass(frozen=True)
class DocumentUpload:
    """Document metadata as declared by Telegram."""

    file_id: str
    mime_type: str | None
    file_size: int | None = None
    file_name: str | None = None


def validate_upload(mime_type: str | None, file_size: int | None) -> None:
    """Reject unsupported formats and files over 20 MiB."""
    if mime_type not in SUPPORTED_CONTENT_TYPES:
        raise ValidationError(replies.UNSUPPORTED_FORMAT_TEXT)
    if file_size is not None and file_size > MAX_FILE_SIZE:
        raise ValidationError(replies.FILE_TOO_LARGE_TEXT)


def output_file_name(original_name: str, media_type: str) -> str:
    """Name the edited file after the upload and the returned media type."""
    stem, _ = posixpath.splitext(posixpath.basename(original_name))
    _, _, subtype = media_type.partition("/")
    return f"edited_{stem}.{subtype or 'png'}"


@dataclass
class ConversationController:
    """Route user events through the per-user session state machine.

    A user is either idle (no session stored) or awaiting an instruction
    (a session holds their last uploaded image). Every per-request failure
    ends here as a chat message; the session is only cleared after the
    edited document was delivered or on explicit cancel.
    """

    telegram_client: TelegramClient
    media_fetcher: MediaFetcher
    edit_service: ImageEditService
    session_store: SessionStore
    stats: BotStats = field(default_factory=BotStats)
    _in_flight: set[int] = field(default_factory=set, init=False, repr=False)

    async def handle_document(
        self, user_id: int, chat_id: int, upload: DocumentUpload
    ) -> None:
        """Validate, download and store an uploaded image."""
        logger.info(
            "Document received",
            extra={
                "user_id": user_id,
                "file_name": upload.file_name,
                "file_size": upload.file_size,
                "mime_type": upload.mime_type,
            },
        )
        try:
            validate_upload(upload.mime_type, upload.file_size)
        except ValidationError as exc:
            await self._notify(chat_id, str(exc))
            return

        await self._notify(chat_id, replies.LOADING_TEXT)
        try:
            media = await self.media_fetcher.fetch(upload.file_id)
        except DownloadError as exc:
            await self._notify(
                chat_id,
                f"❌ Error processing the file: {exc}",
                reply_markup=replies.MAIN_REPLY_KEYBOARD,
            )
            return

        self.session_store.put(
            user_id,
            Session(
                image_data=media.data,
                content_type=media.content_type,
                original_name=upload.file_name or media.file_name,
            ),
        )
        await self._notify(
            chat_id,
            replies.IMAGE_RECEIVED_TEXT,
            reply_markup=replies.RECEIVED_INLINE_KEYBOARD,
            parse_mode="Markdown",
        )

    async def handle_text(self, user_id: int, chat_id: int, text: str) -> None:
        """Apply an edit instruction to the user's pending image."""
        session = self.session_store.get(user_id)
        if session is None:
            await self._notify(
                chat_id, replies.NO_IMAGE_TEXT, reply_markup=replies.MAIN_REPLY_KEYBOARD
            )
            return
        if user_id in self._in_flight:
            await self._notify(chat_id, replies.BUSY_TEXT)
            return

        self._in_flight.add(user_id)
        try:
            await self._run_edit(user_id, chat_id, session, text)
        finally:
            self._in_flight.discard(user_id)

    async def handle_cancel(self, user_id: int, chat_id: int) -> None:
        """Drop the pending image, if any."""
        logger.info("Cancel requested", extra={"user_id": user_id})
        if self.session_store.clear(user_id):
            text = replies.CANCELLED_TEXT
        else:
            text = replies.NOTHING_TO_CANCEL_TEXT
        await self._notify(chat_id, text, reply_markup=replies.MAIN_REPLY_KEYBOARD)

    async def handle_upload_new(self, user_id: int, chat_id: int) -> None:
        """Forget the pending image and ask for a new one."""
        self.session_store.clear(user_id)
        await self._notify(
            chat_id,
            replies.UPLOAD_HINT_TEXT,
            reply_markup=replies.EDITING_REPLY_KEYBOARD,
        )

    async def handle_photo(self, chat_id: int) -> None:
        """Ask for an uncompressed document instead of a photo."""
        await self._notify(
            chat_id,
            replies.PHOTO_WARNING_TEXT,
            reply_markup=replies.PHOTO_INLINE_KEYBOARD,
            parse_mode="Markdown",
        )

    async def _run_edit(
        self, user_id: int, chat_id: int, session: Session, text: str
    ) -> None:
        logger.info(
            "Processing image edit request",
            extra={"user_id": user_id, "prompt_length": len(text)},
        )
        placeholder_id = await self._notify(chat_id, replies.PROCESSING_TEXT)
        failure: Outcome | None = None
        try:
            result = await self.edit_service.edit(
                session.image_data, session.content_type, text
            )
        except UpstreamError as exc:
            failure = exc.outcome
        except ExtractionError as exc:
            logger.error(
                "Edit response had no usable image",
                extra={"user_id": user_id, "error": str(exc)},
            )
            failure = Outcome(OutcomeKind.GENERIC, str(exc))
        except Exception as exc:
            logger.exception("Unexpected edit failure", extra={"user_id": user_id})
            failure = Outcome(OutcomeKind.GENERIC, str(exc))

        await self._delete_quietly(chat_id, placeholder_id)
        if self.session_store.get(user_id) is not session:
            logger.info(
                "Discarding edit outcome for a session that is gone",
                extra={"user_id": user_id, "failed": failure is not None},
            )
            return
        if failure is not None:
            await self._report_failure(chat_id, failure)
            return

        try:
            await self.telegram_client.send_document(
                chat_id,
                result.data,
                filename=output_file_name(session.original_name, result.media_type),
                content_type=result.media_type,
                caption=replies.DONE_CAPTION,
                reply_markup=replies.RESULT_INLINE_KEYBOARD,
            )
        except TransportError as exc:
            logger.exception("Failed to deliver edited image")
            await self._report_failure(chat_id, Outcome(OutcomeKind.GENERIC, str(exc)))
            return

        self.session_store.clear(user_id)
        self.stats.record_success()
        logger.info("Image processed successfully", extra={"user_id": user_id})
        await self._notify(
            chat_id, replies.NEXT_STEP_TEXT, reply_markup=replies.MAIN_REPLY_KEYBOARD
        )

    async def _report_failure(self, chat_id: int, outcome: Outcome) -> None:
        self.stats.record_error(outcome.user_message)
        await self._notify(
            chat_id,
            f"{outcome.user_message}\n\n{replies.RETRY_HINT}",
            reply_markup=replies.RETRY_INLINE_KEYBOARD,
        )

    async def _notify(
        self,
        chat_id: int,
        text: str,
        reply_markup: dict | None = None,
        parse_mode: str | None = None,
    ) -> int | None:
        try:
            return await self.telegram_client.send_message(
                chat_id, text, reply_markup=reply_markup, parse_mode=parse_mode
            )
        except TransportError:
            logger.exception("Failed to send message", extra={"chat_id": chat_id})
            return None

    async def _delete_quietly(self, chat_id: int, message_id: int | None) -> None:
        if message_id is None:
            return
        try:
            await self.telegram_client.delete_message(chat_id, message_id)
        except TransportError:
            logger.warning(
                "Could not delete placeholder message",
                extra={"chat_id": chat_id, "message_id": message_id},
            )
