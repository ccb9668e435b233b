"""Map completion API failures to user-facing outcomes."""

from dataclasses import dataclass
from enum import Enum


class OutcomeKind(Enum):
    """Categories of upstream failure shown to users."""

    RATE_LIMITED = "rate_limited"
    INSUFFICIENT_CREDIT = "insufficient_credit"
    INVALID_CREDENTIAL = "invalid_credential"
    GENERIC = "generic"


_TEMPLATES: dict[OutcomeKind, str] = {
    OutcomeKind.RATE_LIMITED: "⚠️ Rate limit exceeded. Please try again later.",
    OutcomeKind.INSUFFICIENT_CREDIT: "💳 Insufficient balance on the AI provider.",
    OutcomeKind.INVALID_CREDENTIAL: "🔑 The AI provider rejected the API key.",
    OutcomeKind.GENERIC: "❌ API error: {message}",
}


@dataclass(frozen=True)
class Outcome:
    """Classified upstream failure."""

    kind: OutcomeKind
    message: str | None = None

    @property
    def user_message(self) -> str:
        """Render the fixed template for this outcome."""
        return _TEMPLATES[self.kind].format(message=self.message or "")


def classify(status_code: int | None, message: str) -> Outcome:
    """Classify an HTTP status (or None for network failures)."""
    if status_code == 429:  # noqa: PLR2004
        return Outcome(OutcomeKind.RATE_LIMITED)
    if status_code == 402:  # noqa: PLR2004
        return Outcome(OutcomeKind.INSUFFICIENT_CREDIT)
    if status_code in {401, 403}:
        return Outcome(OutcomeKind.INVALID_CREDENTIAL)
    return Outcome(OutcomeKind.GENERIC, message)
