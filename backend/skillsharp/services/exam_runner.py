"""Exam Runner Service — start/resume, answer and submit timed exam attempts.

Invariants:
    - One attempt per (exam, student); a submitted attempt is final
    - Question set order: linked bank MCQs by order_index, then custom questions
    - Answers are upserted per question and refused once the clock hits zero
    - Submitting after the clock ran out is accepted and flagged auto_submitted
    - Submit grades against the question set as it stands then: score <= total_questions

Design Decisions:
    - `now` is injectable on every operation so timing rules are testable without sleeping
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.core.domain_types import QuestionSource
from skillsharp.core.errors import (
    BusinessRuleError, ConflictError, ErrorContext, NotApprovedError,
    ResourceNotFoundError,
)
from skillsharp.core.exam_timing import check_exam_window, remaining_seconds
from skillsharp.core.scoring import calculate_percentage, is_correct_option
from skillsharp.models.attempt import ExamAnswer, ExamAttempt
from skillsharp.models.exam import InstituteExam
from skillsharp.models.mcq import QuestionFields
from skillsharp.schemas.exam import ExamAnswerSubmit
from skillsharp.services.exam_authoring import (
    enroll, get_exam_or_404, list_bank_questions, list_custom_questions,
)
from skillsharp.services.institutes import is_approved_member

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExamQuestion:
    source: QuestionSource
    row: QuestionFields

    @property
    def id(self) -> UUID:
        return self.row.id


@dataclass
class AttemptState:
    exam: InstituteExam
    attempt: ExamAttempt
    questions: list[ExamQuestion]
    answers: dict[UUID, str]
    remaining_seconds: int


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


async def exam_question_set(db: AsyncSession, exam_id: UUID) -> list[ExamQuestion]:
    bank = await list_bank_questions(db, exam_id)
    custom = await list_custom_questions(db, exam_id)
    return (
        [ExamQuestion(QuestionSource.BANK, q) for q in bank]
        + [ExamQuestion(QuestionSource.CUSTOM, q) for q in custom]
    )


async def _find_attempt(
    db: AsyncSession, exam_id: UUID, student_id: UUID,
) -> ExamAttempt | None:
    result = await db.execute(
        select(ExamAttempt).where(
            ExamAttempt.exam_id == exam_id, ExamAttempt.student_id == student_id,
        ),
    )
    return result.scalar_one_or_none()


async def _answers_by_question(db: AsyncSession, attempt_id: UUID) -> dict[UUID, ExamAnswer]:
    result = await db.execute(select(ExamAnswer).where(ExamAnswer.attempt_id == attempt_id))
    return {(a.mcq_id or a.institute_mcq_id): a for a in result.scalars().all()}


def _time_left(exam: InstituteExam, attempt: ExamAttempt, now: datetime) -> int:
    return remaining_seconds(attempt.started_at, exam.duration_minutes, now, exam.closes_at)


async def start_or_resume(
    db: AsyncSession, exam_id: UUID, student_id: UUID, now: datetime | None = None,
) -> AttemptState:
    now = _now(now)
    exam = await get_exam_or_404(db, exam_id)
    ctx = ErrorContext(user_id=str(student_id), resource_id=str(exam_id))

    attempt = await _find_attempt(db, exam_id, student_id)
    if attempt and attempt.is_submitted:
        raise ConflictError(
            "You have already submitted this exam", "EXAM_ALREADY_SUBMITTED", ctx,
        )
    if not exam.is_active:
        raise BusinessRuleError("This exam is not active", "EXAM_INACTIVE", ctx)
    check_exam_window(exam.opens_at, exam.closes_at, now)
    if not await is_approved_member(db, exam.institute_id, student_id):
        raise NotApprovedError(ctx)

    await enroll(db, exam.id, student_id)
    questions = await exam_question_set(db, exam.id)
    if not questions:
        raise BusinessRuleError("This exam has no questions yet", "NO_QUESTIONS", ctx)

    if attempt is None:
        attempt = ExamAttempt(
            exam_id=exam.id,
            student_id=student_id,
            total_questions=len(questions),
            started_at=now,
        )
        db.add(attempt)
        logger.info("Exam attempt started", extra={"user_id": student_id, "exam_id": exam.id})
    await db.commit()
    await db.refresh(attempt)

    answers = await _answers_by_question(db, attempt.id)
    return AttemptState(
        exam=exam,
        attempt=attempt,
        questions=questions,
        answers={qid: a.selected_option for qid, a in answers.items()},
        remaining_seconds=_time_left(exam, attempt, now),
    )


async def _get_open_attempt(
    db: AsyncSession, attempt_id: UUID, student_id: UUID,
) -> tuple[ExamAttempt, InstituteExam]:
    attempt = await db.get(ExamAttempt, attempt_id)
    if not attempt or attempt.student_id != student_id:
        raise ResourceNotFoundError("Attempt", str(attempt_id))
    if attempt.is_submitted:
        raise ConflictError(
            "You have already submitted this exam", "EXAM_ALREADY_SUBMITTED",
            ErrorContext(user_id=str(student_id), resource_id=str(attempt_id)),
        )
    exam = await get_exam_or_404(db, attempt.exam_id)
    return attempt, exam


async def record_answer(
    db: AsyncSession, attempt_id: UUID, student_id: UUID, body: ExamAnswerSubmit,
    now: datetime | None = None,
) -> ExamAnswer:
    """Insert or replace the attempt's answer for one question."""
    now = _now(now)
    attempt, exam = await _get_open_attempt(db, attempt_id, student_id)
    if _time_left(exam, attempt, now) <= 0:
        raise BusinessRuleError("Time is up for this exam", "EXAM_TIME_UP")

    source = QuestionSource(body.source)
    question = next(
        (q for q in await exam_question_set(db, exam.id)
         if q.id == body.question_id and q.source == source),
        None,
    )
    if question is None:
        raise ResourceNotFoundError("Question", str(body.question_id))

    correct = is_correct_option(question.row.correct_option, body.selected_option)
    existing = (await _answers_by_question(db, attempt.id)).get(question.id)
    if existing:
        existing.selected_option = body.selected_option
        existing.is_correct = correct
        existing.answered_at = now
        answer = existing
    else:
        answer = ExamAnswer(
            attempt_id=attempt.id,
            mcq_id=question.id if source is QuestionSource.BANK else None,
            institute_mcq_id=question.id if source is QuestionSource.CUSTOM else None,
            selected_option=body.selected_option,
            is_correct=correct,
            answered_at=now,
        )
        db.add(answer)
    await db.commit()
    await db.refresh(answer)
    return answer


async def submit_attempt(
    db: AsyncSession, attempt_id: UUID, student_id: UUID, now: datetime | None = None,
) -> ExamAttempt:
    """Grade and close the attempt. Unanswered questions count as wrong.

    The exam's questions can change while an attempt is open, so the total is
    recounted here and answers to questions no longer in the exam are ignored.
    """
    now = _now(now)
    attempt, exam = await _get_open_attempt(db, attempt_id, student_id)
    answers = await _answers_by_question(db, attempt.id)
    questions = await exam_question_set(db, exam.id)
    score = 0
    for q in questions:
        answer = answers.get(q.id)
        if answer is None:
            continue
        answer.is_correct = is_correct_option(q.row.correct_option, answer.selected_option)
        score += answer.is_correct

    attempt.total_questions = len(questions)
    attempt.score = score
    attempt.percentage = calculate_percentage(score, attempt.total_questions)
    attempt.is_submitted = True
    attempt.auto_submitted = _time_left(exam, attempt, now) <= 0
    attempt.completed_at = now
    await db.commit()
    await db.refresh(attempt)
    logger.info(
        f"Exam submitted: {score}/{attempt.total_questions}"
        + (" (auto)" if attempt.auto_submitted else ""),
        extra={"user_id": student_id, "exam_id": exam.id, "attempt_id": attempt.id},
    )
    return attempt
