"""Per-user storage of the pending image."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol

from image_editor_bot.domain.sessions import Session


class SessionStore(Protocol):
    """Key-value store holding at most one session per user."""

    def put(self, user_id: int, session: Session) -> None:
        """Store a session, replacing any previous one."""

    def get(self, user_id: int) -> Session | None:
        """Return the user's session, if present."""

    def clear(self, user_id: int) -> bool:
        """Remove the user's session and report whether one existed."""


@dataclass
class _SessionEntry:
    session: Session
    stored_at: datetime


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


class InMemorySessionStore(SessionStore):
    """Dict-backed session store with optional idle expiry."""

    def __init__(
        self,
        idle_ttl_seconds: int | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._entries: dict[int, _SessionEntry] = {}
        self._ttl = (
            timedelta(seconds=idle_ttl_seconds) if idle_ttl_seconds else None
        )
        self._clock = clock

    def put(self, user_id: int, session: Session) -> None:
        """Store a session for the user."""
        self._entries[user_id] = _SessionEntry(session=session, stored_at=self._clock())

    def get(self, user_id: int) -> Session | None:
        """Return the session unless it has been idle past the TTL."""
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        if self._ttl is not None and self._clock() - entry.stored_at >= self._ttl:
            self._entries.pop(user_id, None)
            return None
        return entry.session

    def clear(self, user_id: int) -> bool:
        """Drop the user's session."""
        if self.get(user_id) is None:
            return False
        self._entries.pop(user_id, None)
        return True

    def __len__(self) -> int:
        return len(self._entries)
