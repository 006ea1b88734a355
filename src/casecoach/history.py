"""Practice history persisted as one JSON array under a fixed storage key."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Protocol

from .errors import PersistenceUnavailable
from .models import PracticeSession

HISTORY_KEY = "caseHistory"

logger = logging.getLogger(__name__)


class StringStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MalformedHistory(ValueError):
    """Stored history does not have the expected shape."""


class HistoryStore:
    """Append-only practice history with a write-through to durable storage.

    The in-memory list is authoritative. A failed write is logged and the
    in-memory change is kept, so the current run still shows the session.
    """

    def __init__(self, store: StringStore, key: str = HISTORY_KEY) -> None:
        self._store = store
        self._key = key
        self._sessions: list[PracticeSession] = []

    @property
    def sessions(self) -> tuple[PracticeSession, ...]:
        return tuple(self._sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    def load(self) -> tuple[PracticeSession, ...]:
        """Replace the in-memory history with the stored one, falling back to empty."""
        try:
            raw = self._store.get(self._key)
        except PersistenceUnavailable as exc:
            logger.warning("Practice history unavailable, starting empty: %s", exc)
            raw = None

        if raw is None:
            self._sessions = []
        else:
            try:
                self._sessions = decode_history(raw)
            except MalformedHistory as exc:
                logger.warning("Ignoring unreadable practice history: %s", exc)
                self._sessions = []
        logger.debug("Loaded %d practice sessions", len(self._sessions))
        return self.sessions

    def append(self, session: PracticeSession) -> None:
        """Add a completed session and persist the full history."""
        self._sessions.append(session)
        self._persist()

    def clear(self) -> None:
        """Drop every session and persist the empty history."""
        self._sessions = []
        self._persist()

    def _persist(self) -> None:
        try:
            self._store.set(self._key, encode_history(self._sessions))
        except PersistenceUnavailable as exc:
            logger.warning("Could not save practice history (kept in memory): %s", exc)


def format_timestamp(value: datetime) -> str:
    """Serialize as ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    text = value.astimezone(UTC).isoformat(timespec="milliseconds")
    return text.replace("+00:00", "Z")


def session_to_dict(session: PracticeSession) -> dict[str, object]:
    return {
        "caseType": session.case_type_name,
        "industry": session.industry_name,
        "duration": session.duration_seconds,
        "timestamp": format_timestamp(session.timestamp),
    }


def session_from_dict(raw: object) -> PracticeSession:
    """Parse one stored record; raises MalformedHistory on any shape mismatch."""
    if not isinstance(raw, dict):
        raise MalformedHistory(f"record is not an object: {raw!r}")
    case_type = raw.get("caseType")
    industry = raw.get("industry")
    duration = raw.get("duration")
    timestamp = raw.get("timestamp")
    if not isinstance(case_type, str) or not case_type:
        raise MalformedHistory("record has no caseType")
    if industry is not None and not isinstance(industry, str):
        raise MalformedHistory("record industry must be a string or null")
    if isinstance(duration, bool) or not isinstance(duration, int) or duration < 0:
        raise MalformedHistory(f"record duration is not a non-negative integer: {duration!r}")
    if not isinstance(timestamp, str):
        raise MalformedHistory("record has no timestamp")
    try:
        parsed = datetime.fromisoformat(timestamp)
    except ValueError as exc:
        raise MalformedHistory(f"record timestamp is not ISO-8601: {timestamp!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return PracticeSession(
        case_type_name=case_type,
        industry_name=industry,
        duration_seconds=duration,
        timestamp=parsed,
    )


def encode_history(sessions: list[PracticeSession] | tuple[PracticeSession, ...]) -> str:
    return json.dumps([session_to_dict(session) for session in sessions], ensure_ascii=False)


def decode_history(text: str) -> list[PracticeSession]:
    """Parse the stored JSON array; the whole value is rejected if any record is bad."""
    try:
        raw: object = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise MalformedHistory(f"not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise MalformedHistory("history root must be a JSON array")
    return [session_from_dict(item) for item in raw]
