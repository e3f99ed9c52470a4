"""Exam Authoring Routes — institute owners manage exams and their question sets.

Invariants:
    - Every exam route resolves the caller's own institute first; foreign exams are 404
    - Question listings reveal correct options (author view)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, require_institute
from skillsharp.api.serializers import (
    exam_attempt_dict, exam_dict, profile_brief, question_dict,
)
from skillsharp.infrastructure.database import get_db
from skillsharp.models.exam import InstituteExam
from skillsharp.schemas.exam import CustomQuestionBatch, ExamCreate, ExamUpdate
from skillsharp.services import content, exam_authoring
from skillsharp.services.institutes import get_owned_institute

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/exams", tags=["exams"])


async def owned_exam(
    exam_id: UUID,
    user: CurrentUser = Depends(require_institute),
    db: AsyncSession = Depends(get_db),
) -> InstituteExam:
    """Dependency: the exam, provided it belongs to the caller's institute."""
    institute = await get_owned_institute(db, user.id)
    return await exam_authoring.get_institute_exam(db, institute.id, exam_id)


@router.get("")
async def list_exams(
    user: CurrentUser = Depends(require_institute), db: AsyncSession = Depends(get_db),
):
    institute = await get_owned_institute(db, user.id)
    rows = await exam_authoring.list_exams_with_counts(db, institute.id)
    return {
        "exams": [
            {**exam_dict(r["exam"]), "enrollment_count": r["enrollment_count"]}
            for r in rows
        ],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_exam(
    body: ExamCreate,
    user: CurrentUser = Depends(require_institute),
    db: AsyncSession = Depends(get_db),
):
    institute = await get_owned_institute(db, user.id)
    return exam_dict(await exam_authoring.create_exam(db, institute, body, user.id))


@router.get("/bank-catalog")
async def bank_catalog(
    chapter_id: UUID = Query(...),
    _: CurrentUser = Depends(require_institute),
    db: AsyncSession = Depends(get_db),
):
    """Bank MCQs of a chapter, for picking exam questions."""
    mcqs = await content.list_mcqs(db, chapter_id)
    return {"mcqs": [question_dict(m, reveal=True) for m in mcqs]}


@router.get("/{exam_id}")
async def get_exam(
    exam: InstituteExam = Depends(owned_exam), db: AsyncSession = Depends(get_db),
):
    details = await exam_authoring.exam_details(db, exam)
    return {
        **exam_dict(exam),
        "bank_question_count": details["bank_question_count"],
        "custom_question_count": details["custom_question_count"],
        "attempts": [
            {**exam_attempt_dict(a), "student": profile_brief(p)}
            for a, p in details["attempts"]
        ],
    }


@router.patch("/{exam_id}")
async def update_exam(
    body: ExamUpdate,
    exam: InstituteExam = Depends(owned_exam),
    db: AsyncSession = Depends(get_db),
):
    return exam_dict(await exam_authoring.update_exam(db, exam, body))


@router.delete("/{exam_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_exam(
    exam: InstituteExam = Depends(owned_exam), db: AsyncSession = Depends(get_db),
):
    await exam_authoring.delete_exam(db, exam)


@router.get("/{exam_id}/questions")
async def list_questions(
    exam: InstituteExam = Depends(owned_exam), db: AsyncSession = Depends(get_db),
):
    bank = await exam_authoring.list_bank_questions(db, exam.id)
    custom = await exam_authoring.list_custom_questions(db, exam.id)
    return {
        "bank": [question_dict(q, reveal=True, source="bank") for q in bank],
        "custom": [question_dict(q, reveal=True, source="custom") for q in custom],
        "total": len(bank) + len(custom),
    }


@router.post("/{exam_id}/bank-questions/{mcq_id}")
async def toggle_bank_question(
    mcq_id: UUID,
    exam: InstituteExam = Depends(owned_exam),
    db: AsyncSession = Depends(get_db),
):
    """Link the bank MCQ to the exam, or unlink it when already linked."""
    added = await exam_authoring.toggle_bank_question(db, exam, mcq_id)
    return {"mcq_id": str(mcq_id), "selected": added}


@router.post("/{exam_id}/custom-questions", status_code=status.HTTP_201_CREATED)
async def add_custom_questions(
    body: CustomQuestionBatch,
    exam: InstituteExam = Depends(owned_exam),
    user: CurrentUser = Depends(require_institute),
    db: AsyncSession = Depends(get_db),
):
    rows = await exam_authoring.add_custom_questions(db, exam, body.questions, user.id)
    return {
        "created": len(rows),
        "questions": [question_dict(q, reveal=True, source="custom") for q in rows],
    }


@router.post("/{exam_id}/custom-questions/import", status_code=status.HTTP_201_CREATED)
async def import_custom_questions(
    file: UploadFile = File(...),
    exam: InstituteExam = Depends(owned_exam),
    user: CurrentUser = Depends(require_institute),
    db: AsyncSession = Depends(get_db),
):
    rows = await exam_authoring.import_exam_csv(db, exam, await file.read(), user.id)
    logger.info(
        f"CSV import '{file.filename}': {len(rows)} questions",
        extra={"exam_id": exam.id, "user_id": user.id},
    )
    return {
        "created": len(rows),
        "questions": [question_dict(q, reveal=True, source="custom") for q in rows],
    }


@router.delete(
    "/{exam_id}/custom-questions/{question_id}", status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_custom_question(
    question_id: UUID,
    exam: InstituteExam = Depends(owned_exam),
    db: AsyncSession = Depends(get_db),
):
    await exam_authoring.delete_custom_question(db, exam, question_id)
