"""Subject Routes — bank subjects: listing for everyone, edits for content managers."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, get_current_user, require_content_manager
from skillsharp.api.serializers import chapter_dict, subject_dict
from skillsharp.infrastructure.database import get_db
from skillsharp.schemas.content import SubjectCreate, SubjectUpdate
from skillsharp.services import content

router = APIRouter(prefix="/api/v1/subjects", tags=["content"])


@router.get("")
async def list_subjects(
    _: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    rows = await content.list_subjects(db)
    return {"subjects": [subject_dict(r["subject"], r["chapter_count"]) for r in rows]}


@router.get("/{subject_id}")
async def get_subject(
    subject_id: UUID,
    _: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Subject with its chapters, MCQ counts and lock flags."""
    subject = await content.get_subject_or_404(db, subject_id)
    chapters = await content.list_chapters(db, subject_id)
    return {
        **subject_dict(subject),
        "chapters": [chapter_dict(r["chapter"], r["mcq_count"]) for r in chapters],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_subject(
    body: SubjectCreate,
    user: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    return subject_dict(await content.create_subject(db, body, user.id))


@router.patch("/{subject_id}")
async def update_subject(
    subject_id: UUID,
    body: SubjectUpdate,
    _: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    return subject_dict(await content.update_subject(db, subject_id, body))


@router.delete("/{subject_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subject(
    subject_id: UUID,
    _: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    await content.delete_subject(db, subject_id)
