"""Derived practice statistics over the history list."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .models import CaseType, PracticeSession

RECENT_LIMIT = 10
WEAK_SPOT_MAX_COUNT = 1


@dataclass(frozen=True)
class WeakSpot:
    """Case type practiced at most once."""

    case_type: CaseType
    count: int


@dataclass(frozen=True)
class PracticeStats:
    """Snapshot of totals, recent sessions, and under-practiced case types."""

    total_sessions: int
    total_duration: int
    average_duration: int
    recent_history: tuple[PracticeSession, ...]
    practice_counts: dict[str, int]
    weak_spots: tuple[WeakSpot, ...]


def compute_stats(sessions: Sequence[PracticeSession], case_types: Iterable[CaseType]) -> PracticeStats:
    """Recompute every derived view; ``case_types`` must be in catalog order.

    Counts are keyed by case type display name, matching how history is stored.
    """
    total_sessions = len(sessions)
    total_duration = sum(session.duration_seconds for session in sessions)
    counts = dict(Counter(session.case_type_name for session in sessions))
    weak_spots = tuple(
        WeakSpot(case_type=case_type, count=counts.get(case_type.name, 0))
        for case_type in case_types
        if counts.get(case_type.name, 0) <= WEAK_SPOT_MAX_COUNT
    )
    return PracticeStats(
        total_sessions=total_sessions,
        total_duration=total_duration,
        average_duration=_round_half_up_div(total_duration, total_sessions),
        recent_history=tuple(reversed(sessions[-RECENT_LIMIT:])),
        practice_counts=counts,
        weak_spots=weak_spots,
    )


def _round_half_up_div(numerator: int, denominator: int) -> int:
    if denominator <= 0:
        return 0
    return (2 * numerator + denominator) // (2 * denominator)
