"""Practice Service — chapter tests: questions, answer checks, grading and progress.

Invariants:
    - Questions go out without correct_option or explanation
    - total_questions is the chapter's MCQ count at submission; skipped count as wrong
    - Only answered questions are stored as TestAnswer rows
    - Premium chapters require an active premium window unless the viewer manages content
"""

import logging
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.core.errors import (
    BusinessRuleError, ErrorContext, PremiumRequiredError, ResourceNotFoundError,
)
from skillsharp.core.premium import is_premium_active
from skillsharp.core.roles import CONTENT_MANAGERS, has_any_role
from skillsharp.core.scoring import (
    ChapterProgress, ScoreResult, grade_answer_sheet, is_correct_option,
    overall_average, summarize_attempts,
)
from skillsharp.models.attempt import TestAnswer, TestAttempt
from skillsharp.models.chapter import Chapter
from skillsharp.models.mcq import Mcq
from skillsharp.models.profile import Profile
from skillsharp.schemas.practice import PracticeSubmission
from skillsharp.services.content import get_chapter_or_404

logger = logging.getLogger(__name__)


def ensure_chapter_access(chapter: Chapter, profile: Profile, now: datetime) -> None:
    """Raise PremiumRequiredError when the profile may not practice the chapter."""
    if not chapter.is_premium:
        return
    if has_any_role(profile.role_names, CONTENT_MANAGERS):
        return
    if not is_premium_active(profile.premium_until, now):
        raise PremiumRequiredError(ErrorContext(
            user_id=str(profile.id), resource_id=str(chapter.id),
        ))


async def _chapter_mcqs(db: AsyncSession, chapter_id: UUID) -> list[Mcq]:
    result = await db.execute(
        select(Mcq).where(Mcq.chapter_id == chapter_id).order_by(Mcq.created_at, Mcq.id),
    )
    return list(result.scalars().all())


async def get_practice_questions(
    db: AsyncSession, chapter_id: UUID, profile: Profile,
) -> tuple[Chapter, list[Mcq]]:
    chapter = await get_chapter_or_404(db, chapter_id)
    ensure_chapter_access(chapter, profile, datetime.now(timezone.utc))
    mcqs = await _chapter_mcqs(db, chapter_id)
    if not mcqs:
        raise BusinessRuleError("This chapter has no questions yet", "NO_QUESTIONS")
    return chapter, mcqs


async def check_answer(
    db: AsyncSession, mcq_id: UUID, selected_option: str, profile: Profile,
) -> bool:
    """Same premium gate as the chapter the MCQ belongs to."""
    mcq = await db.get(Mcq, mcq_id)
    if not mcq:
        raise ResourceNotFoundError("MCQ", str(mcq_id))
    chapter = await get_chapter_or_404(db, mcq.chapter_id)
    ensure_chapter_access(chapter, profile, datetime.now(timezone.utc))
    return is_correct_option(mcq.correct_option, selected_option)


async def submit_practice(
    db: AsyncSession, chapter_id: UUID, profile: Profile, body: PracticeSubmission,
) -> tuple[TestAttempt, ScoreResult, dict[str, Mcq]]:
    """Grade a submission against the whole chapter and store the attempt."""
    chapter, mcqs = await get_practice_questions(db, chapter_id, profile)
    answer_key = [(str(m.id), m.correct_option) for m in mcqs]
    answers = {str(mcq_id): option for mcq_id, option in body.answers.items()}
    result = grade_answer_sheet(answer_key, answers)

    now = datetime.now(timezone.utc)
    attempt = TestAttempt(
        student_id=profile.id,
        chapter_id=chapter.id,
        score=result.score,
        total_questions=result.total,
        percentage=result.percentage,
        started_at=body.started_at or now,
        completed_at=now,
    )
    db.add(attempt)
    await db.flush()
    db.add_all([
        TestAnswer(
            attempt_id=attempt.id,
            mcq_id=UUID(review.question_id),
            selected_option=review.selected_option,
            is_correct=review.is_correct,
        )
        for review in result.reviews if not review.skipped
    ])
    await db.commit()
    await db.refresh(attempt)
    logger.info(
        f"Practice submitted: {result.score}/{result.total}",
        extra={"user_id": profile.id, "attempt_id": attempt.id},
    )
    return attempt, result, {str(m.id): m for m in mcqs}


async def list_attempts(
    db: AsyncSession, student_id: UUID, chapter_id: UUID | None = None,
) -> list[TestAttempt]:
    stmt = (
        select(TestAttempt)
        .where(TestAttempt.student_id == student_id)
        .order_by(TestAttempt.completed_at.desc())
    )
    if chapter_id is not None:
        stmt = stmt.where(TestAttempt.chapter_id == chapter_id)
    return list((await db.execute(stmt)).scalars().all())


async def student_progress(
    db: AsyncSession, student_id: UUID,
) -> tuple[dict[UUID, ChapterProgress], float]:
    """Per-chapter progress plus the overall average across all attempts."""
    attempts = await list_attempts(db, student_id)
    by_chapter: dict[UUID, list[float]] = {}
    for attempt in attempts:
        by_chapter.setdefault(attempt.chapter_id, []).append(attempt.percentage)
    progress = {
        chapter_id: summarize_attempts(values)
        for chapter_id, values in by_chapter.items()
    }
    return progress, overall_average(a.percentage for a in attempts)


async def reset_chapter_progress(
    db: AsyncSession, student_id: UUID, chapter_id: UUID,
) -> int:
    """Delete the student's attempts (and answers) for a chapter. Returns count removed."""
    await get_chapter_or_404(db, chapter_id)
    attempt_ids = (await db.execute(
        select(TestAttempt.id).where(
            TestAttempt.student_id == student_id,
            TestAttempt.chapter_id == chapter_id,
        ),
    )).scalars().all()
    if attempt_ids:
        await db.execute(delete(TestAnswer).where(TestAnswer.attempt_id.in_(attempt_ids)))
        await db.execute(delete(TestAttempt).where(TestAttempt.id.in_(attempt_ids)))
        await db.commit()
    logger.info(
        f"Progress reset for chapter {chapter_id}: {len(attempt_ids)} attempts",
        extra={"user_id": student_id},
    )
    return len(attempt_ids)
