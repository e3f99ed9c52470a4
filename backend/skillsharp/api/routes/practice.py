"""Practice Routes — chapter tests for students.

Invariants:
    - Question payloads never include the correct option before submission
    - Grading happens server-side; the client only sends selected options
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, get_current_user
from skillsharp.api.serializers import chapter_dict, practice_attempt_dict, question_dict
from skillsharp.config import get_settings
from skillsharp.infrastructure.database import get_db
from skillsharp.schemas.practice import AnswerCheck, PracticeSubmission
from skillsharp.services import practice

router = APIRouter(prefix="/api/v1/practice", tags=["practice"])


@router.get("/chapters/{chapter_id}/questions")
async def get_questions(
    chapter_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    chapter, mcqs = await practice.get_practice_questions(db, chapter_id, user.profile)
    return {
        "chapter": chapter_dict(chapter, len(mcqs)),
        "questions": [question_dict(m) for m in mcqs],
    }


@router.post("/check")
async def check_answer(
    body: AnswerCheck,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Correctness of one selection; the correct option itself is not revealed."""
    correct = await practice.check_answer(db, body.mcq_id, body.selected_option, user.profile)
    return {"is_correct": correct}


@router.post("/chapters/{chapter_id}/submit")
async def submit(
    chapter_id: UUID,
    body: PracticeSubmission,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    attempt, result, mcqs = await practice.submit_practice(db, chapter_id, user.profile, body)
    return {
        "attempt": practice_attempt_dict(attempt),
        "score": result.score,
        "total_questions": result.total,
        "percentage": round(result.percentage, 2),
        "passed": result.is_passing(get_settings().pass_threshold),
        "review": [
            {
                **question_dict(mcqs[r.question_id]),
                "selected_option": r.selected_option,
                "correct_option": r.correct_option,
                "is_correct": r.is_correct,
                "skipped": r.skipped,
                "explanation": mcqs[r.question_id].explanation,
            }
            for r in result.reviews
        ],
    }


@router.get("/progress")
async def progress(
    user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    by_chapter, overall = await practice.student_progress(db, user.id)
    return {
        "chapters": {
            str(chapter_id): {
                "attempts_count": p.attempts_count,
                "latest_score": p.latest_score,
                "best_score": p.best_score,
                "average_score": round(p.average_score, 2),
            }
            for chapter_id, p in by_chapter.items()
        },
        "total_attempts": sum(p.attempts_count for p in by_chapter.values()),
        "overall_average": round(overall, 2),
    }


@router.get("/attempts")
async def attempts(
    chapter_id: UUID | None = Query(None),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await practice.list_attempts(db, user.id, chapter_id)
    return {"attempts": [practice_attempt_dict(a) for a in rows]}


@router.delete("/chapters/{chapter_id}/progress")
async def reset_progress(
    chapter_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"deleted": await practice.reset_chapter_progress(db, user.id, chapter_id)}
