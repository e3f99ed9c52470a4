"""Admin Service — user management and dashboard counts.

Invariants:
    - Blocking a user also ends their device session (listeners get a DELETE event)
    - An admin cannot block themselves
"""

import logging
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.core.domain_types import AppRole
from skillsharp.core.errors import BusinessRuleError
from skillsharp.models.chapter import Chapter
from skillsharp.models.institute import Institute
from skillsharp.models.mcq import Mcq
from skillsharp.models.profile import Profile, UserRole
from skillsharp.models.subject import Subject
from skillsharp.services.accounts import get_profile_or_404
from skillsharp.services.payments import count_pending
from skillsharp.services.user_sessions import end_session

logger = logging.getLogger(__name__)


async def list_users(db: AsyncSession, search: str | None = None) -> list[Profile]:
    stmt = select(Profile).order_by(Profile.created_at.desc())
    if search:
        pattern = f"%{search.strip().lower()}%"
        stmt = stmt.where(
            func.lower(Profile.email).like(pattern)
            | func.lower(func.coalesce(Profile.full_name, "")).like(pattern),
        )
    return list((await db.execute(stmt)).scalars().all())


async def set_user_active(
    db: AsyncSession, user_id: UUID, active: bool, actor_id: UUID,
) -> Profile:
    if user_id == actor_id and not active:
        raise BusinessRuleError("You cannot block your own account", "SELF_BLOCK")
    profile = await get_profile_or_404(db, user_id)
    profile.is_active = active
    await db.commit()
    await db.refresh(profile)
    if not active:
        await end_session(db, user_id)
    logger.info(
        f"User {'unblocked' if active else 'blocked'}",
        extra={"user_id": user_id},
    )
    return profile


async def _count(db: AsyncSession, stmt) -> int:
    return int((await db.execute(stmt)).scalar_one())


async def dashboard_counts(db: AsyncSession) -> dict[str, int]:
    return {
        "subjects": await _count(db, select(func.count(Subject.id))),
        "chapters": await _count(db, select(func.count(Chapter.id))),
        "mcqs": await _count(db, select(func.count(Mcq.id))),
        "students": await _count(
            db,
            select(func.count(func.distinct(UserRole.user_id)))
            .where(UserRole.role == AppRole.STUDENT.value),
        ),
        "institutes": await _count(db, select(func.count(Institute.id))),
        "pending_payments": await count_pending(db),
    }
