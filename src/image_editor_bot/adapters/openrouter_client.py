"""OpenRouter chat completions client built on the OpenAI SDK."""

import logging
from dataclasses import dataclass

from openai import APIConnectionError, APIStatusError, AsyncOpenAI
from openai.types.chat import ChatCompletion

from image_editor_bot.domain.errors import UpstreamCallError
from image_editor_bot.services.editing import CompletionClient

logger = logging.getLogger(__name__)


@dataclass
class OpenRouterCompletionClient(CompletionClient):
    """Completion client for OpenRouter's OpenAI-compatible API."""

    client: AsyncOpenAI

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        api_key: str,
        base_url: str,
        timeout_seconds: float,
        referer: str | None = None,
        title: str | None = None,
        google_api_key: str | None = None,
    ) -> "OpenRouterCompletionClient":
        """Create a client; retries are left to the edit service."""
        headers: dict[str, str] = {}
        if referer:
            headers["HTTP-Referer"] = referer
        if title:
            headers["X-Title"] = title
        if google_api_key:
            headers["X-Google-API-Key"] = google_api_key
        return cls(
            client=AsyncOpenAI(
                api_key=api_key,
                base_url=base_url,
                timeout=timeout_seconds,
                max_retries=0,
                default_headers=headers,
            )
        )

    async def complete(
        self, *, model: str, messages: list[dict[str, object]]
    ) -> dict[str, object]:
        """Call chat completions and return the full response body."""
        try:
            response = await self.client.chat.completions.create(
                model=model, messages=messages
            )
        except APIStatusError as exc:
            raise UpstreamCallError(
                _error_message(exc), status_code=exc.status_code
            ) from exc
        except APIConnectionError as exc:
            raise UpstreamCallError(str(exc)) from exc

        if not isinstance(response, ChatCompletion):
            logger.error(
                "Unexpected OpenRouter response",
                extra={"response_type": type(response).__name__},
            )
            raise UpstreamCallError("OpenRouter returned an unexpected response")

        usage = response.usage.model_dump() if response.usage else None
        logger.info(
            "OpenRouter API response", extra={"model": response.model, "usage": usage}
        )
        return response.model_dump()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()


def _error_message(exc: APIStatusError) -> str:
    """Prefer the vendor's error.message over the SDK summary."""
    body = exc.body
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message:
            return message
    return exc.message
