"""Content Service — subjects, chapters and bank MCQs, including CSV import.

Invariants:
    - Deleting a subject removes its chapters; deleting a chapter removes its MCQs
    - Removing an MCQ removes every answer, attempt link and exam link pointing at it
    - owner_id restricts MCQ visibility and edits to rows created by that profile
    - A chapter with zero MCQs is locked

Design Decisions:
    - Cascades are explicit bulk deletes: SQLite (tests) does not enforce FK actions
"""

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select, delete, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.config import get_settings
from skillsharp.core.csv_import import decode_upload, ensure_importable, parse_mcq_csv
from skillsharp.core.errors import PermissionDeniedError, ResourceNotFoundError
from skillsharp.models.attempt import ExamAnswer, TestAnswer, TestAttempt
from skillsharp.models.chapter import Chapter
from skillsharp.models.exam import ExamMcq, InstituteExam
from skillsharp.models.mcq import Mcq
from skillsharp.models.subject import Subject
from skillsharp.schemas.content import (
    ChapterCreate, ChapterUpdate, McqUpdate, QuestionIn, SubjectCreate, SubjectUpdate,
)

logger = logging.getLogger(__name__)


def _apply(row, changes: dict) -> None:
    for field, value in changes.items():
        setattr(row, field, value)


# ─── Subjects ────────────────────────────────────────────────────

async def list_subjects(db: AsyncSession) -> list[dict]:
    counts = (
        select(Chapter.subject_id, func.count(Chapter.id).label("n"))
        .group_by(Chapter.subject_id)
        .subquery()
    )
    result = await db.execute(
        select(Subject, func.coalesce(counts.c.n, 0))
        .outerjoin(counts, counts.c.subject_id == Subject.id)
        .order_by(Subject.name),
    )
    return [
        {"subject": subject, "chapter_count": int(n)}
        for subject, n in result.all()
    ]


async def get_subject_or_404(db: AsyncSession, subject_id: UUID) -> Subject:
    subject = await db.get(Subject, subject_id)
    if not subject:
        raise ResourceNotFoundError("Subject", str(subject_id))
    return subject


async def create_subject(db: AsyncSession, body: SubjectCreate, actor_id: UUID) -> Subject:
    subject = Subject(name=body.name, description=body.description, created_by=actor_id)
    db.add(subject)
    await db.commit()
    await db.refresh(subject)
    return subject


async def update_subject(db: AsyncSession, subject_id: UUID, body: SubjectUpdate) -> Subject:
    subject = await get_subject_or_404(db, subject_id)
    _apply(subject, body.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(subject)
    return subject


async def delete_subject(db: AsyncSession, subject_id: UUID) -> None:
    subject = await get_subject_or_404(db, subject_id)
    chapter_ids = (await db.execute(
        select(Chapter.id).where(Chapter.subject_id == subject_id),
    )).scalars().all()
    await _delete_chapters(db, chapter_ids)
    await db.execute(
        update(InstituteExam)
        .where(InstituteExam.subject_id == subject_id)
        .values(subject_id=None),
    )
    await db.delete(subject)
    await db.commit()
    logger.info(f"Subject deleted: {subject_id} ({len(chapter_ids)} chapters)")


# ─── Chapters ────────────────────────────────────────────────────

async def get_chapter_or_404(db: AsyncSession, chapter_id: UUID) -> Chapter:
    chapter = await db.get(Chapter, chapter_id)
    if not chapter:
        raise ResourceNotFoundError("Chapter", str(chapter_id))
    return chapter


async def list_chapters(db: AsyncSession, subject_id: UUID) -> list[dict]:
    """Chapters of a subject in order, each with its MCQ count and lock flag."""
    await get_subject_or_404(db, subject_id)
    counts = (
        select(Mcq.chapter_id, func.count(Mcq.id).label("n"))
        .group_by(Mcq.chapter_id)
        .subquery()
    )
    result = await db.execute(
        select(Chapter, func.coalesce(counts.c.n, 0))
        .outerjoin(counts, counts.c.chapter_id == Chapter.id)
        .where(Chapter.subject_id == subject_id)
        .order_by(Chapter.order_index, Chapter.created_at),
    )
    return [
        {"chapter": chapter, "mcq_count": int(n), "is_locked": int(n) == 0}
        for chapter, n in result.all()
    ]


async def create_chapter(db: AsyncSession, body: ChapterCreate, actor_id: UUID) -> Chapter:
    await get_subject_or_404(db, body.subject_id)
    chapter = Chapter(**body.model_dump(), created_by=actor_id)
    db.add(chapter)
    await db.commit()
    await db.refresh(chapter)
    return chapter


async def update_chapter(db: AsyncSession, chapter_id: UUID, body: ChapterUpdate) -> Chapter:
    chapter = await get_chapter_or_404(db, chapter_id)
    _apply(chapter, body.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(chapter)
    return chapter


async def delete_chapter(db: AsyncSession, chapter_id: UUID) -> None:
    await get_chapter_or_404(db, chapter_id)
    await _delete_chapters(db, [chapter_id])
    await db.commit()


async def _delete_chapters(db: AsyncSession, chapter_ids: Sequence[UUID]) -> None:
    if not chapter_ids:
        return
    mcq_ids = (await db.execute(
        select(Mcq.id).where(Mcq.chapter_id.in_(chapter_ids)),
    )).scalars().all()
    await _delete_mcqs(db, mcq_ids)
    attempt_ids = select(TestAttempt.id).where(TestAttempt.chapter_id.in_(chapter_ids))
    await db.execute(delete(TestAnswer).where(TestAnswer.attempt_id.in_(attempt_ids)))
    await db.execute(delete(TestAttempt).where(TestAttempt.chapter_id.in_(chapter_ids)))
    await db.execute(delete(Chapter).where(Chapter.id.in_(chapter_ids)))


async def _delete_mcqs(db: AsyncSession, mcq_ids: Sequence[UUID]) -> None:
    if not mcq_ids:
        return
    await db.execute(delete(TestAnswer).where(TestAnswer.mcq_id.in_(mcq_ids)))
    await db.execute(delete(ExamAnswer).where(ExamAnswer.mcq_id.in_(mcq_ids)))
    await db.execute(delete(ExamMcq).where(ExamMcq.mcq_id.in_(mcq_ids)))
    await db.execute(delete(Mcq).where(Mcq.id.in_(mcq_ids)))


# ─── MCQs ────────────────────────────────────────────────────────

async def list_mcqs(
    db: AsyncSession, chapter_id: UUID | None = None, owner_id: UUID | None = None,
) -> list[Mcq]:
    """Bank MCQs, optionally for one chapter and/or one author."""
    stmt = select(Mcq).order_by(Mcq.created_at)
    if chapter_id is not None:
        stmt = stmt.where(Mcq.chapter_id == chapter_id)
    if owner_id is not None:
        stmt = stmt.where(Mcq.created_by == owner_id)
    return list((await db.execute(stmt)).scalars().all())


async def count_mcqs(db: AsyncSession, chapter_id: UUID) -> int:
    result = await db.execute(
        select(func.count(Mcq.id)).where(Mcq.chapter_id == chapter_id),
    )
    return int(result.scalar_one())


async def _get_owned_mcq(db: AsyncSession, mcq_id: UUID, owner_id: UUID | None) -> Mcq:
    mcq = await db.get(Mcq, mcq_id)
    if not mcq:
        raise ResourceNotFoundError("MCQ", str(mcq_id))
    if owner_id is not None and mcq.created_by != owner_id:
        raise PermissionDeniedError("edit MCQs created by another user")
    return mcq


async def create_mcqs(
    db: AsyncSession, chapter_id: UUID, questions: Sequence[QuestionIn], actor_id: UUID,
) -> list[Mcq]:
    await get_chapter_or_404(db, chapter_id)
    mcqs = [
        Mcq(chapter_id=chapter_id, created_by=actor_id, **q.model_dump())
        for q in questions
    ]
    db.add_all(mcqs)
    await db.commit()
    for mcq in mcqs:
        await db.refresh(mcq)
    logger.info(f"Created {len(mcqs)} MCQs", extra={"user_id": actor_id})
    return mcqs


async def update_mcq(
    db: AsyncSession, mcq_id: UUID, body: McqUpdate, owner_id: UUID | None,
) -> Mcq:
    mcq = await _get_owned_mcq(db, mcq_id, owner_id)
    changes = body.model_dump(exclude_unset=True)
    if changes.get("chapter_id") is not None:
        await get_chapter_or_404(db, changes["chapter_id"])
    _apply(mcq, {k: v for k, v in changes.items() if v is not None})
    await db.commit()
    await db.refresh(mcq)
    return mcq


async def delete_mcq(db: AsyncSession, mcq_id: UUID, owner_id: UUID | None) -> None:
    await _get_owned_mcq(db, mcq_id, owner_id)
    await _delete_mcqs(db, [mcq_id])
    await db.commit()


async def import_chapter_csv(
    db: AsyncSession, chapter_id: UUID, raw: bytes, actor_id: UUID,
) -> list[Mcq]:
    """Import every row of an uploaded CSV into a chapter, or nothing at all."""
    await get_chapter_or_404(db, chapter_id)
    rows = ensure_importable(
        parse_mcq_csv(decode_upload(raw)), get_settings().csv_import_max_rows,
    )
    questions = [QuestionIn(**row.as_dict()) for row in rows]
    return await create_mcqs(db, chapter_id, questions, actor_id)
