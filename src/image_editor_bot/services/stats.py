"""Process-local counters exposed by the health endpoints."""

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass
class BotStats:
    """Counters for processed edits and failures."""

    started_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    requests_processed: int = 0
    errors_count: int = 0
    last_error: str | None = None

    def record_success(self) -> None:
        """Count a delivered edit."""
        self.requests_processed += 1

    def record_error(self, message: str) -> None:
        """Count a failed edit."""
        self.errors_count += 1
        self.last_error = message

    def uptime_seconds(self) -> int:
        """Seconds since the process started."""
        return int((datetime.now(tz=UTC) - self.started_at).total_seconds())

    def snapshot(self) -> dict[str, object]:
        """Return counters as a JSON-friendly dict."""
        return {
            "started_at": self.started_at.isoformat(),
            "requests_processed": self.requests_processed,
            "errors_count": self.errors_count,
            "last_error": self.last_error,
        }
