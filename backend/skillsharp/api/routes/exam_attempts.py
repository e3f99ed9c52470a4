"""Student Exam Routes — exam list, enroll by code, and the timed attempt lifecycle.

Invariants:
    - Open attempts never expose correct options
    - remaining_seconds is recomputed server-side on every start/resume
"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, get_current_user
from skillsharp.api.serializers import exam_attempt_dict, exam_dict, institute_dict, question_dict
from skillsharp.core.exam_timing import format_clock
from skillsharp.infrastructure.database import get_db
from skillsharp.schemas.exam import EnrollByCode, ExamAnswerSubmit
from skillsharp.services import exam_authoring, exam_runner

router = APIRouter(prefix="/api/v1/student/exams", tags=["exam-attempts"])


@router.get("")
async def list_my_exams(
    user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    """Active exams of institutes that approved the caller."""
    rows = await exam_authoring.list_student_exams(db, user.id)
    return {
        "exams": [
            {
                **exam_dict(r["exam"]),
                "institute": institute_dict(r["institute"]),
                "attempt": exam_attempt_dict(r["attempt"]) if r["attempt"] else None,
            }
            for r in rows
        ],
    }


@router.post("/enroll")
async def enroll_by_code(
    body: EnrollByCode,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    exam, enrollment = await exam_authoring.enroll_by_code(db, user.id, body.exam_code)
    return {
        "exam": exam_dict(exam),
        "enrolled_at": enrollment.enrolled_at.isoformat(),
    }


@router.post("/{exam_id}/start")
async def start_exam(
    exam_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Start the attempt, or resume it with saved answers and the remaining time."""
    state = await exam_runner.start_or_resume(db, exam_id, user.id)
    return {
        "exam": exam_dict(state.exam),
        "attempt": exam_attempt_dict(state.attempt),
        "remaining_seconds": state.remaining_seconds,
        "remaining_clock": format_clock(state.remaining_seconds),
        "questions": [
            question_dict(q.row, source=q.source.value) for q in state.questions
        ],
        "answers": {str(qid): option for qid, option in state.answers.items()},
    }


@router.put("/attempts/{attempt_id}/answers")
async def save_answer(
    attempt_id: UUID,
    body: ExamAnswerSubmit,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    answer = await exam_runner.record_answer(db, attempt_id, user.id, body)
    return {
        "question_id": str(body.question_id),
        "source": body.source,
        "selected_option": answer.selected_option,
        "answered_at": answer.answered_at.isoformat(),
    }


@router.post("/attempts/{attempt_id}/submit")
async def submit_exam(
    attempt_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    attempt = await exam_runner.submit_attempt(db, attempt_id, user.id)
    return exam_attempt_dict(attempt)
