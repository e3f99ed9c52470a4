"""Exam Analytics Service — results, per-question difficulty and answer review.

Invariants:
    - Only submitted attempts count toward performance and question statistics
    - Performance rows sorted by completion time, newest first
    - Question stats sorted by success rate ascending (hardest first)
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.core.domain_types import QuestionSource
from skillsharp.core.errors import ResourceNotFoundError
from skillsharp.core.exam_timing import minutes_between
from skillsharp.core.rankings import question_statistics
from skillsharp.core.scoring import overall_average
from skillsharp.models.attempt import ExamAnswer, ExamAttempt
from skillsharp.models.exam import InstituteExam
from skillsharp.models.profile import Profile
from skillsharp.services.exam_runner import exam_question_set


async def _submitted_attempts(db: AsyncSession, exam_id: UUID) -> list[tuple[ExamAttempt, Profile]]:
    result = await db.execute(
        select(ExamAttempt, Profile)
        .join(Profile, Profile.id == ExamAttempt.student_id)
        .where(ExamAttempt.exam_id == exam_id, ExamAttempt.is_submitted.is_(True))
        .order_by(ExamAttempt.completed_at.desc()),
    )
    return [(a, p) for a, p in result.all()]


async def student_performance(db: AsyncSession, exam: InstituteExam) -> dict:
    rows = []
    for attempt, profile in await _submitted_attempts(db, exam.id):
        rows.append({
            "attempt_id": str(attempt.id),
            "student_id": str(profile.id),
            "full_name": profile.full_name,
            "email": profile.email,
            "score": attempt.score or 0,
            "total_questions": attempt.total_questions,
            "percentage": round(attempt.percentage or 0.0, 2),
            "time_taken_minutes": minutes_between(attempt.started_at, attempt.completed_at),
            "auto_submitted": attempt.auto_submitted,
            "completed_at": attempt.completed_at.isoformat() if attempt.completed_at else None,
        })
    return {
        "students": rows,
        "total_submissions": len(rows),
        "average_percentage": round(overall_average(r["percentage"] for r in rows), 2),
    }


async def question_performance(db: AsyncSession, exam: InstituteExam) -> list[dict]:
    result = await db.execute(
        select(ExamAnswer)
        .join(ExamAttempt, ExamAttempt.id == ExamAnswer.attempt_id)
        .where(ExamAttempt.exam_id == exam.id, ExamAttempt.is_submitted.is_(True)),
    )
    answers = result.scalars().all()
    stats = question_statistics(
        (
            str(a.mcq_id or a.institute_mcq_id),
            QuestionSource.BANK.value if a.mcq_id else QuestionSource.CUSTOM.value,
            a.is_correct,
        )
        for a in answers
    )
    texts = {str(q.id): q.row.question for q in await exam_question_set(db, exam.id)}
    return [
        {
            "question_id": s.question_id,
            "source": s.source,
            "question": texts.get(s.question_id),
            "correct_count": s.correct_count,
            "wrong_count": s.wrong_count,
            "total_attempts": s.total_attempts,
            "success_rate": round(s.success_rate, 2),
        }
        for s in stats
    ]


async def attempt_review(db: AsyncSession, exam: InstituteExam, attempt_id: UUID) -> dict:
    """Every exam question with the correct option and what the student picked."""
    attempt = await db.get(ExamAttempt, attempt_id)
    if not attempt or attempt.exam_id != exam.id:
        raise ResourceNotFoundError("Attempt", str(attempt_id))
    profile = await db.get(Profile, attempt.student_id)
    result = await db.execute(select(ExamAnswer).where(ExamAnswer.attempt_id == attempt.id))
    picked = {(a.mcq_id or a.institute_mcq_id): a for a in result.scalars().all()}

    questions = []
    for q in await exam_question_set(db, exam.id):
        answer = picked.get(q.id)
        questions.append({
            "question_id": str(q.id),
            "source": q.source.value,
            "question": q.row.question,
            "options": q.row.options(),
            "correct_option": q.row.correct_option,
            "selected_option": answer.selected_option if answer else None,
            "is_correct": bool(answer and answer.is_correct),
            "explanation": q.row.explanation,
        })
    return {
        "attempt_id": str(attempt.id),
        "student": {
            "id": str(profile.id), "full_name": profile.full_name, "email": profile.email,
        } if profile else None,
        "score": attempt.score,
        "total_questions": attempt.total_questions,
        "percentage": attempt.percentage,
        "is_submitted": attempt.is_submitted,
        "questions": questions,
    }
