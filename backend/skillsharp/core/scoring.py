"""Scoring — pure grading of answer sheets and chapter progress summaries.

Invariants:
    - Options normalized to lower-case letters before any comparison
    - Skipped (unanswered) questions count toward total, never toward score
    - percentage is 0.0 when total is 0 (never divides by zero)
    - Progress statistics expect attempts ordered newest first
"""

from dataclasses import dataclass
from collections.abc import Iterable, Mapping, Sequence

from skillsharp.core.domain_types import OptionLetter


DEFAULT_PASS_THRESHOLD: float = 60.0

_NUMERIC_OPTIONS = {"1": "a", "2": "b", "3": "c", "4": "d"}


def normalize_option(raw: str) -> str:
    """Map user/CSV spellings of an option to "a".."d".

    Accepts a-d, A-D, 1-4 and option_a..option_d. Raises ValueError otherwise.
    """
    value = (raw or "").strip().lower()
    if value.startswith("option_"):
        value = value[len("option_"):]
    value = _NUMERIC_OPTIONS.get(value, value)
    try:
        return OptionLetter(value).value
    except ValueError:
        raise ValueError(f"invalid option '{raw}' (expected a, b, c or d)")


def is_correct_option(correct_option: str, selected_option: str) -> bool:
    """Compare a stored correct option with a selection, case-insensitively."""
    try:
        return normalize_option(correct_option) == normalize_option(selected_option)
    except ValueError:
        return False


def calculate_percentage(score: int, total: int) -> float:
    if total <= 0:
        return 0.0
    return score / total * 100


@dataclass(frozen=True)
class QuestionReview:
    question_id: str
    selected_option: str | None
    correct_option: str
    is_correct: bool

    @property
    def skipped(self) -> bool:
        return self.selected_option is None


@dataclass(frozen=True)
class ScoreResult:
    score: int
    total: int
    percentage: float
    reviews: tuple[QuestionReview, ...] = ()

    def is_passing(self, threshold: float = DEFAULT_PASS_THRESHOLD) -> bool:
        return self.percentage >= threshold


def grade_answer_sheet(
    answer_key: Sequence[tuple[str, str]],
    answers: Mapping[str, str],
) -> ScoreResult:
    """Grade answers against an ordered answer key of (question_id, correct_option).

    Answers for questions outside the key are ignored.
    """
    reviews = []
    for question_id, correct in answer_key:
        selected = answers.get(question_id)
        selected_norm = None
        if selected is not None:
            try:
                selected_norm = normalize_option(selected)
            except ValueError:
                selected_norm = None
        correct_norm = normalize_option(correct)
        reviews.append(QuestionReview(
            question_id=question_id,
            selected_option=selected_norm,
            correct_option=correct_norm,
            is_correct=selected_norm == correct_norm,
        ))
    score = sum(1 for r in reviews if r.is_correct)
    total = len(answer_key)
    return ScoreResult(
        score=score,
        total=total,
        percentage=calculate_percentage(score, total),
        reviews=tuple(reviews),
    )


# ─── Progress ────────────────────────────────────────────────────

@dataclass(frozen=True)
class ChapterProgress:
    attempts_count: int = 0
    latest_score: float | None = None
    best_score: float | None = None
    average_score: float = 0.0


def summarize_attempts(percentages_newest_first: Iterable[float]) -> ChapterProgress:
    """Latest, best and average percentage over a chapter's attempts."""
    values = [float(p) for p in percentages_newest_first]
    if not values:
        return ChapterProgress()
    return ChapterProgress(
        attempts_count=len(values),
        latest_score=values[0],
        best_score=max(values),
        average_score=sum(values) / len(values),
    )


def overall_average(percentages: Iterable[float]) -> float:
    values = [float(p) for p in percentages]
    if not values:
        return 0.0
    return sum(values) / len(values)
