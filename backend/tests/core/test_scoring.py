"""Scoring — tests for option normalization, grading and progress summaries.

Tests cover:
    - normalize_option accepts a-d, A-D, 1-4, option_a..option_d
    - grade_answer_sheet counts skipped questions toward total only
    - percentage is 0 for an empty key
    - summarize_attempts latest/best/average with newest-first input
"""

import pytest

from skillsharp.core.scoring import (
    ChapterProgress, calculate_percentage, grade_answer_sheet, is_correct_option,
    normalize_option, overall_average, summarize_attempts,
)


@pytest.mark.parametrize("raw", ["a", "A", " a ", "1", "option_a", "OPTION_A"])
def test_normalize_option_spellings_of_a(raw):
    assert normalize_option(raw) == "a"


@pytest.mark.parametrize("raw", ["", "e", "5", "option_z", "ab"])
def test_normalize_option_rejects_garbage(raw):
    with pytest.raises(ValueError):
        normalize_option(raw)


def test_is_correct_option_is_case_insensitive():
    assert is_correct_option("B", "b")
    assert not is_correct_option("b", "c")


def test_is_correct_option_false_for_invalid_selection():
    assert not is_correct_option("a", "z")


def test_calculate_percentage_zero_total():
    assert calculate_percentage(0, 0) == 0.0


# ─── grade_answer_sheet ─────────────────────────────────────────

def test_grade_counts_correct_answers():
    key = [("q1", "a"), ("q2", "b"), ("q3", "c"), ("q4", "d")]
    result = grade_answer_sheet(key, {"q1": "a", "q2": "B", "q3": "d", "q4": "4"})
    assert result.score == 3
    assert result.total == 4
    assert result.percentage == 75.0


def test_skipped_questions_count_toward_total():
    key = [("q1", "a"), ("q2", "b")]
    result = grade_answer_sheet(key, {"q1": "a"})
    assert result.score == 1
    assert result.total == 2
    assert result.percentage == 50.0
    skipped = [r for r in result.reviews if r.skipped]
    assert [r.question_id for r in skipped] == ["q2"]


def test_answers_outside_key_are_ignored():
    result = grade_answer_sheet([("q1", "a")], {"q1": "a", "stray": "b"})
    assert result.total == 1
    assert len(result.reviews) == 1


def test_passing_threshold_inclusive():
    key = [(f"q{i}", "a") for i in range(5)]
    answers = {f"q{i}": "a" for i in range(3)}
    result = grade_answer_sheet(key, answers)
    assert result.percentage == 60.0
    assert result.is_passing(60.0)
    assert not result.is_passing(61.0)


# ─── Progress ────────────────────────────────────────────────────

def test_summarize_attempts_newest_first():
    progress = summarize_attempts([40.0, 80.0, 60.0])
    assert progress.attempts_count == 3
    assert progress.latest_score == 40.0
    assert progress.best_score == 80.0
    assert progress.average_score == 60.0


def test_summarize_no_attempts():
    assert summarize_attempts([]) == ChapterProgress()


def test_overall_average_empty_is_zero():
    assert overall_average([]) == 0.0
    assert overall_average([50, 100]) == 75.0
