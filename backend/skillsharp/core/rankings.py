"""Rankings & Analytics — pure leaderboard ranking and exam statistics.

Invariants:
    - Leaderboard order: avg_score desc, total_score desc, total_attempts desc
    - Tied entries share a rank; the next distinct entry skips (1, 1, 3)
    - Question stats sorted by success_rate ascending (hardest first)
"""

from dataclasses import dataclass, replace
from collections.abc import Iterable


@dataclass(frozen=True)
class LeaderboardEntry:
    user_id: str
    full_name: str
    email: str
    total_attempts: int
    total_score: int
    avg_score: float
    rank: int = 0

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "full_name": self.full_name,
            "email": self.email,
            "total_attempts": self.total_attempts,
            "total_score": self.total_score,
            "avg_score": self.avg_score,
            "rank": self.rank,
        }


def _sort_key(entry: LeaderboardEntry) -> tuple:
    return (-entry.avg_score, -entry.total_score, -entry.total_attempts)


def rank_entries(entries: Iterable[LeaderboardEntry]) -> list[LeaderboardEntry]:
    """Sort and assign competition ranks."""
    ordered = sorted(
        (replace(e, avg_score=round(e.avg_score, 2)) for e in entries),
        key=_sort_key,
    )
    ranked: list[LeaderboardEntry] = []
    previous_key = None
    rank = 0
    for position, entry in enumerate(ordered, start=1):
        key = _sort_key(entry)
        if key != previous_key:
            rank = position
            previous_key = key
        ranked.append(replace(entry, rank=rank))
    return ranked


def find_entry(entries: Iterable[LeaderboardEntry], user_id: str) -> LeaderboardEntry | None:
    for entry in entries:
        if entry.user_id == user_id:
            return entry
    return None


# ─── Exam analytics ──────────────────────────────────────────────

@dataclass(frozen=True)
class QuestionStats:
    question_id: str
    source: str
    correct_count: int
    wrong_count: int

    @property
    def total_attempts(self) -> int:
        return self.correct_count + self.wrong_count

    @property
    def success_rate(self) -> float:
        if self.total_attempts == 0:
            return 0.0
        return self.correct_count / self.total_attempts * 100


def question_statistics(
    answers: Iterable[tuple[str, str, bool]],
) -> list[QuestionStats]:
    """Aggregate (question_id, source, is_correct) answer rows per question."""
    counts: dict[tuple[str, str], list[int]] = {}
    for question_id, source, is_correct in answers:
        bucket = counts.setdefault((question_id, source), [0, 0])
        bucket[0 if is_correct else 1] += 1
    stats = [
        QuestionStats(question_id=qid, source=source, correct_count=c, wrong_count=w)
        for (qid, source), (c, w) in counts.items()
    ]
    return sorted(stats, key=lambda s: s.success_rate)

