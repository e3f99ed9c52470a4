"""MCQ Routes — bank question management for admins and content creators.

Invariants:
    - Content creators list, edit and delete only MCQs they created; admins see all
    - Responses reveal correct_option (management view, never student-facing)
    - CSV import is all-or-nothing (400 CSV_INVALID with per-line details)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, require_content_manager
from skillsharp.api.serializers import question_dict
from skillsharp.infrastructure.database import get_db
from skillsharp.models.mcq import Mcq
from skillsharp.schemas.content import McqBatchCreate, McqUpdate
from skillsharp.services import content

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/mcqs", tags=["content"])


def _mcq_dict(mcq: Mcq) -> dict:
    return question_dict(
        mcq, reveal=True,
        chapter_id=str(mcq.chapter_id), created_by=str(mcq.created_by),
    )


@router.get("")
async def list_mcqs(
    chapter_id: UUID | None = Query(None),
    user: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    mcqs = await content.list_mcqs(db, chapter_id, owner_id=user.mcq_owner_filter)
    return {"mcqs": [_mcq_dict(m) for m in mcqs], "total": len(mcqs)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_mcqs(
    body: McqBatchCreate,
    user: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    """Create one or many MCQs for a chapter in one request."""
    mcqs = await content.create_mcqs(db, body.chapter_id, body.mcqs, user.id)
    return {"created": len(mcqs), "mcqs": [_mcq_dict(m) for m in mcqs]}


@router.post("/import", status_code=status.HTTP_201_CREATED)
async def import_mcqs(
    chapter_id: UUID = Form(...),
    file: UploadFile = File(...),
    user: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    raw = await file.read()
    mcqs = await content.import_chapter_csv(db, chapter_id, raw, user.id)
    logger.info(
        f"CSV import '{file.filename}': {len(mcqs)} MCQs", extra={"user_id": user.id},
    )
    return {"created": len(mcqs), "mcqs": [_mcq_dict(m) for m in mcqs]}


@router.patch("/{mcq_id}")
async def update_mcq(
    mcq_id: UUID,
    body: McqUpdate,
    user: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    return _mcq_dict(await content.update_mcq(db, mcq_id, body, user.mcq_owner_filter))


@router.delete("/{mcq_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_mcq(
    mcq_id: UUID,
    user: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    await content.delete_mcq(db, mcq_id, user.mcq_owner_filter)
