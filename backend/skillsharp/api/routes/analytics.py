"""Exam Analytics Routes — results and difficulty reports for the owning institute."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.routes.exams import owned_exam
from skillsharp.api.serializers import exam_dict
from skillsharp.infrastructure.database import get_db
from skillsharp.models.exam import InstituteExam
from skillsharp.services import exam_analytics

router = APIRouter(prefix="/api/v1/exams/{exam_id}/analytics", tags=["analytics"])


@router.get("/students")
async def student_performance(
    exam: InstituteExam = Depends(owned_exam), db: AsyncSession = Depends(get_db),
):
    report = await exam_analytics.student_performance(db, exam)
    return {"exam": exam_dict(exam), **report}


@router.get("/questions")
async def question_performance(
    exam: InstituteExam = Depends(owned_exam), db: AsyncSession = Depends(get_db),
):
    return {"questions": await exam_analytics.question_performance(db, exam)}


@router.get("/attempts/{attempt_id}")
async def attempt_review(
    attempt_id: UUID,
    exam: InstituteExam = Depends(owned_exam),
    db: AsyncSession = Depends(get_db),
):
    return await exam_analytics.attempt_review(db, exam, attempt_id)
