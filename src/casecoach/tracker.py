"""Binds the selected case type and industry to the practice timer."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from .errors import NoActiveSession
from .history import HistoryStore
from .models import CaseType, Industry, PracticeSession
from .timer import PracticeTimer

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(UTC)


class SessionTracker:
    """Holds the active selection and turns a finished attempt into history."""

    def __init__(
        self,
        timer: PracticeTimer,
        history: HistoryStore,
        now: Callable[[], datetime] = utc_now,
    ) -> None:
        self.timer = timer
        self._history = history
        self._now = now
        self.selected_industry: Industry | None = None
        self.active_case_type: CaseType | None = None

    @property
    def has_active_session(self) -> bool:
        return self.active_case_type is not None

    def select_industry(self, industry: Industry | None) -> None:
        self.selected_industry = industry

    def select_case_type(self, case_type: CaseType) -> None:
        """Make ``case_type`` the pending session; a different pending one is dropped."""
        previous = self.active_case_type
        if previous is not None and previous.id != case_type.id:
            if self.timer.running or self.timer.elapsed_seconds:
                logger.info("Discarding unfinished %s attempt at %s", previous.name, self.timer.display)
            self.timer.reset()
        self.active_case_type = case_type

    def start_timer(self) -> None:
        if self.active_case_type is None:
            raise NoActiveSession("Please select a case type first.")
        self.timer.start()

    def pause_timer(self) -> bool:
        return self.timer.pause()

    def reset_timer(self) -> None:
        self.timer.reset()

    def complete(self) -> PracticeSession:
        """Record the current attempt, then reset the timer and clear the selection."""
        if self.active_case_type is None:
            raise NoActiveSession()
        self.timer.stop()
        session = self.complete_session(self.timer.elapsed_seconds)
        self.timer.reset()
        self.active_case_type = None
        return session

    def complete_session(self, elapsed_seconds: int) -> PracticeSession:
        if self.active_case_type is None:
            raise NoActiveSession()
        if elapsed_seconds < 0:
            raise ValueError(f"elapsed_seconds must be non-negative, got {elapsed_seconds}")
        session = PracticeSession(
            case_type_name=self.active_case_type.name,
            industry_name=self.selected_industry.name if self.selected_industry is not None else None,
            duration_seconds=int(elapsed_seconds),
            timestamp=self._now(),
        )
        self._history.append(session)
        logger.info("Recorded %s session (%ds)", session.case_type_name, session.duration_seconds)
        return session
