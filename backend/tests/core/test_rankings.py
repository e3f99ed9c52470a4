"""Rankings & Analytics — tests for leaderboard ordering and question statistics.

Tests cover:
    - Ordering by avg_score, then total_score, then total_attempts
    - Competition ranking for ties (1, 1, 3)
    - find_entry lookup
    - question_statistics aggregation sorted hardest first
"""

from skillsharp.core.rankings import (
    LeaderboardEntry, find_entry, question_statistics, rank_entries,
)


def _entry(user_id, avg, total=10, attempts=1):
    return LeaderboardEntry(
        user_id=user_id, full_name=user_id, email=f"{user_id}@x.test",
        total_attempts=attempts, total_score=total, avg_score=avg,
    )


def test_sorted_by_average_desc():
    ranked = rank_entries([_entry("a", 50), _entry("b", 90), _entry("c", 70)])
    assert [e.user_id for e in ranked] == ["b", "c", "a"]
    assert [e.rank for e in ranked] == [1, 2, 3]


def test_ties_broken_by_total_score_then_attempts():
    ranked = rank_entries([
        _entry("a", 80, total=10, attempts=1),
        _entry("b", 80, total=20, attempts=1),
        _entry("c", 80, total=20, attempts=3),
    ])
    assert [e.user_id for e in ranked] == ["c", "b", "a"]


def test_full_ties_share_rank_and_skip():
    ranked = rank_entries([_entry("a", 80), _entry("b", 80), _entry("c", 60)])
    assert [e.rank for e in ranked] == [1, 1, 3]


def test_average_rounded_to_two_places():
    ranked = rank_entries([_entry("a", 66.66666)])
    assert ranked[0].avg_score == 66.67


def test_find_entry():
    ranked = rank_entries([_entry("a", 50), _entry("b", 90)])
    assert find_entry(ranked, "a").rank == 2
    assert find_entry(ranked, "zzz") is None


def test_question_statistics_hardest_first():
    stats = question_statistics([
        ("q1", "bank", True), ("q1", "bank", True),
        ("q2", "custom", False), ("q2", "custom", True),
        ("q3", "bank", False),
    ])
    assert [s.question_id for s in stats] == ["q3", "q2", "q1"]
    q2 = stats[1]
    assert q2.correct_count == 1
    assert q2.wrong_count == 1
    assert q2.success_rate == 50.0
