from datetime import UTC, datetime, timedelta

from conftest import make_case_type

from casecoach.models import PracticeSession
from casecoach.stats import compute_stats

CATALOG = [make_case_type("a", "A"), make_case_type("b", "B"), make_case_type("c", "C")]
BASE = datetime(2025, 1, 1, tzinfo=UTC)


def _sessions(*entries: tuple[str, int]) -> list[PracticeSession]:
    return [
        PracticeSession(
            case_type_name=name,
            industry_name=None,
            duration_seconds=duration,
            timestamp=BASE + timedelta(minutes=i),
        )
        for i, (name, duration) in enumerate(entries)
    ]


def test_empty_history() -> None:
    stats = compute_stats([], CATALOG)
    assert stats.total_sessions == 0
    assert stats.total_duration == 0
    assert stats.average_duration == 0
    assert stats.recent_history == ()
    assert stats.practice_counts == {}
    assert [spot.case_type.name for spot in stats.weak_spots] == ["A", "B", "C"]
    assert all(spot.count == 0 for spot in stats.weak_spots)


def test_totals_and_average() -> None:
    stats = compute_stats(_sessions(("A", 60), ("A", 90), ("B", 90)), CATALOG)
    assert stats.total_sessions == 3
    assert stats.total_duration == 240
    assert stats.average_duration == 80


def test_average_rounds_half_up() -> None:
    assert compute_stats(_sessions(("A", 1), ("A", 2)), CATALOG).average_duration == 2
    assert compute_stats(_sessions(("A", 1), ("A", 1), ("A", 2)), CATALOG).average_duration == 1
    assert compute_stats(_sessions(("A", 5), ("A", 6)), CATALOG).average_duration == 6


def test_totals_track_every_append() -> None:
    durations = [13, 0, 250, 61, 7]
    sessions: list[PracticeSession] = []
    for count, duration in enumerate(durations, start=1):
        sessions.extend(_sessions(("A", duration)))
        stats = compute_stats(sessions, CATALOG)
        assert stats.total_sessions == count
        assert stats.total_duration == sum(durations[:count])


def test_recent_history_is_last_ten_newest_first() -> None:
    sessions = _sessions(*[(f"Case {i}", i) for i in range(15)])
    stats = compute_stats(sessions, CATALOG)
    assert [item.case_type_name for item in stats.recent_history] == [f"Case {i}" for i in range(14, 4, -1)]


def test_recent_history_shorter_than_limit() -> None:
    stats = compute_stats(_sessions(("A", 1), ("B", 2), ("C", 3)), CATALOG)
    assert [item.case_type_name for item in stats.recent_history] == ["C", "B", "A"]


def test_practice_counts_by_display_name() -> None:
    stats = compute_stats(_sessions(("A", 1), ("B", 1), ("A", 1), ("Retired Case", 5)), CATALOG)
    assert stats.practice_counts == {"A": 2, "B": 1, "Retired Case": 1}


def test_weak_spots_in_catalog_order() -> None:
    twice_a = _sessions(("A", 10), ("A", 10))
    stats = compute_stats(twice_a, CATALOG)
    assert [spot.case_type.name for spot in stats.weak_spots] == ["B", "C"]

    once_b = twice_a + _sessions(("B", 10))
    stats = compute_stats(once_b, CATALOG)
    assert [(spot.case_type.name, spot.count) for spot in stats.weak_spots] == [("B", 1), ("C", 0)]

    twice_b = once_b + _sessions(("B", 10))
    stats = compute_stats(twice_b, CATALOG)
    assert [spot.case_type.name for spot in stats.weak_spots] == ["C"]
