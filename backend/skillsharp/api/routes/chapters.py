"""Chapter Routes — chapters of a subject, with MCQ counts for students."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, get_current_user, require_content_manager
from skillsharp.api.serializers import chapter_dict
from skillsharp.infrastructure.database import get_db
from skillsharp.schemas.content import ChapterCreate, ChapterUpdate
from skillsharp.services import content

router = APIRouter(prefix="/api/v1/chapters", tags=["content"])


@router.get("")
async def list_chapters(
    subject_id: UUID = Query(...),
    _: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await content.list_chapters(db, subject_id)
    return {"chapters": [chapter_dict(r["chapter"], r["mcq_count"]) for r in rows]}


@router.get("/{chapter_id}")
async def get_chapter(
    chapter_id: UUID,
    _: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    chapter = await content.get_chapter_or_404(db, chapter_id)
    return chapter_dict(chapter, await content.count_mcqs(db, chapter_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_chapter(
    body: ChapterCreate,
    user: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    return chapter_dict(await content.create_chapter(db, body, user.id), 0)


@router.patch("/{chapter_id}")
async def update_chapter(
    chapter_id: UUID,
    body: ChapterUpdate,
    _: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    return chapter_dict(await content.update_chapter(db, chapter_id, body))


@router.delete("/{chapter_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chapter(
    chapter_id: UUID,
    _: CurrentUser = Depends(require_content_manager),
    db: AsyncSession = Depends(get_db),
):
    await content.delete_chapter(db, chapter_id)
