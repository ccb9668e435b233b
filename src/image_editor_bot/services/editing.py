"""Image edit requests against a multimodal chat completion API."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from image_editor_bot.domain.edits import EditResult
from image_editor_bot.domain.errors import UpstreamCallError, UpstreamError
from image_editor_bot.services.classifier import classify
from image_editor_bot.services.extraction import extract_edit_result, to_data_uri

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_DIRECTIVE = (
    "You are a careful image editor. Apply exactly the change the user asks "
    "for and leave everything else untouched. Preserve the original layout, "
    "fonts, colors and resolution. Do not add watermarks, signatures or any "
    "other extra elements."
)
RETRYABLE_STATUS_CODES = frozenset({429, 503})


class CompletionClient(Protocol):
    """Interface for a chat completion endpoint that can return images."""

    async def complete(
        self, *, model: str, messages: list[dict[str, object]]
    ) -> dict[str, object]:
        """Send one completion request and return the decoded JSON body."""


def is_retryable_error(exc: BaseException) -> bool:
    """Retry network failures, rate limits and unavailable upstreams."""
    if not isinstance(exc, UpstreamCallError):
        return False
    return exc.status_code is None or exc.status_code in RETRYABLE_STATUS_CODES


def _log_retry(state: RetryCallState) -> None:
    exc = state.outcome.exception() if state.outcome else None
    logger.warning(
        "Retry attempt %s for completion request",
        state.attempt_number,
        extra={
            "error": str(exc),
            "status": getattr(exc, "status_code", None),
        },
    )


@dataclass(frozen=True)
class RetryPolicy:
    """How often and when to repeat a failed completion request."""

    max_attempts: int = 3
    wait: Callable[[RetryCallState], float] = field(
        default_factory=lambda: wait_exponential(multiplier=1, max=10)
    )
    is_retryable: Callable[[BaseException], bool] = is_retryable_error

    def retrying(self) -> AsyncRetrying:
        """Build a tenacity controller for one request."""
        return AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            retry=retry_if_exception(self.is_retryable),
            before_sleep=_log_retry,
            reraise=True,
        )


def build_messages(
    image_data: bytes,
    content_type: str,
    instruction: str,
    system_directive: str | None = None,
) -> list[dict[str, object]]:
    """Assemble the single-turn multimodal message list."""
    text = instruction
    if system_directive:
        text = f"{system_directive}\n\n=== USER REQUEST ===\n{instruction}"
    return [
        {
            "role": "user",
            "content": [
                {
                    "type": "image_url",
                    "image_url": {"url": to_data_uri(image_data, content_type)},
                },
                {"type": "text", "text": text},
            ],
        }
    ]


@dataclass
class ImageEditService:
    """Send images with edit instructions and decode the edited result."""

    client: CompletionClient
    model: str
    system_directive: str | None = DEFAULT_SYSTEM_DIRECTIVE
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)

    async def edit(
        self, image_data: bytes, content_type: str, instruction: str
    ) -> EditResult:
        """Edit an image according to the instruction."""
        messages = build_messages(
            image_data, content_type, instruction, self.system_directive
        )
        logger.info(
            "Sending edit request",
            extra={
                "model": self.model,
                "prompt_length": len(instruction),
                "image_size": len(image_data),
            },
        )
        try:
            async for attempt in self.retry_policy.retrying():
                with attempt:
                    body = await self.client.complete(
                        model=self.model, messages=messages
                    )
        except UpstreamCallError as exc:
            logger.error(
                "Edit request failed",
                extra={"status": exc.status_code, "error": exc.message},
            )
            raise UpstreamError(classify(exc.status_code, exc.message)) from exc

        result = extract_edit_result(body)
        logger.info(
            "Edited image decoded",
            extra={"size": len(result.data), "media_type": result.media_type},
        )
        return result
