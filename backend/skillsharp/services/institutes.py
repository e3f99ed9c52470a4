"""Institute Service — institutes, join-by-code and membership approval.

Invariants:
    - A student holds at most one membership per institute
    - Only active institutes accept join requests
    - Only the owning profile manages an institute's members
"""

import logging
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.core.errors import ConflictError, ErrorContext, ResourceNotFoundError
from skillsharp.models.exam import InstituteExam
from skillsharp.models.institute import Institute, InstituteStudent
from skillsharp.models.profile import Profile

logger = logging.getLogger(__name__)


async def get_institute_or_404(db: AsyncSession, institute_id: UUID) -> Institute:
    institute = await db.get(Institute, institute_id)
    if not institute:
        raise ResourceNotFoundError("Institute", str(institute_id))
    return institute


async def get_owned_institute(db: AsyncSession, owner_id: UUID) -> Institute:
    """The institute run by this profile."""
    result = await db.execute(
        select(Institute)
        .where(Institute.created_by == owner_id)
        .order_by(Institute.created_at)
        .limit(1),
    )
    institute = result.scalar_one_or_none()
    if not institute:
        raise ResourceNotFoundError(
            "Institute", f"owned by {owner_id}", ErrorContext(user_id=str(owner_id)),
        )
    return institute


async def join_institute(db: AsyncSession, student_id: UUID, code: str) -> InstituteStudent:
    result = await db.execute(
        select(Institute).where(
            Institute.institute_code == code, Institute.is_active.is_(True),
        ),
    )
    institute = result.scalar_one_or_none()
    if not institute:
        raise ResourceNotFoundError("Institute", code)

    existing = await get_membership(db, institute.id, student_id)
    if existing and existing.is_approved:
        raise ConflictError("You are already a member of this institute", "ALREADY_MEMBER")
    if existing:
        raise ConflictError(
            "Your request to join this institute is still pending", "REQUEST_PENDING",
        )

    membership = InstituteStudent(
        institute_id=institute.id, student_id=student_id, is_approved=False,
    )
    db.add(membership)
    await db.commit()
    await db.refresh(membership)
    logger.info(
        "Join request created",
        extra={"user_id": student_id, "institute_id": institute.id},
    )
    return membership


async def get_membership(
    db: AsyncSession, institute_id: UUID, student_id: UUID,
) -> InstituteStudent | None:
    result = await db.execute(
        select(InstituteStudent).where(
            InstituteStudent.institute_id == institute_id,
            InstituteStudent.student_id == student_id,
        ),
    )
    return result.scalar_one_or_none()


async def is_approved_member(db: AsyncSession, institute_id: UUID, student_id: UUID) -> bool:
    membership = await get_membership(db, institute_id, student_id)
    return bool(membership and membership.is_approved)


async def list_members(db: AsyncSession, institute_id: UUID) -> list[tuple[InstituteStudent, Profile]]:
    result = await db.execute(
        select(InstituteStudent, Profile)
        .join(Profile, Profile.id == InstituteStudent.student_id)
        .where(InstituteStudent.institute_id == institute_id)
        .order_by(InstituteStudent.joined_at.desc()),
    )
    return [(m, p) for m, p in result.all()]


async def set_member_approval(
    db: AsyncSession, institute_id: UUID, membership_id: UUID, approved: bool,
) -> InstituteStudent:
    membership = await db.get(InstituteStudent, membership_id)
    if not membership or membership.institute_id != institute_id:
        raise ResourceNotFoundError("Membership", str(membership_id))
    membership.is_approved = approved
    await db.commit()
    await db.refresh(membership)
    logger.info(
        f"Membership {'approved' if approved else 'revoked'}",
        extra={"user_id": membership.student_id, "institute_id": institute_id},
    )
    return membership


async def list_student_memberships(
    db: AsyncSession, student_id: UUID,
) -> list[tuple[InstituteStudent, Institute]]:
    result = await db.execute(
        select(InstituteStudent, Institute)
        .join(Institute, Institute.id == InstituteStudent.institute_id)
        .where(InstituteStudent.student_id == student_id)
        .order_by(InstituteStudent.joined_at.desc()),
    )
    return [(m, i) for m, i in result.all()]


async def approved_institute_ids(db: AsyncSession, student_id: UUID) -> list[UUID]:
    result = await db.execute(
        select(InstituteStudent.institute_id).where(
            InstituteStudent.student_id == student_id,
            InstituteStudent.is_approved.is_(True),
        ),
    )
    return list(result.scalars().all())


# ─── Admin ───────────────────────────────────────────────────────

async def list_institutes_with_counts(db: AsyncSession) -> list[dict]:
    students = (
        select(InstituteStudent.institute_id, func.count(InstituteStudent.id).label("n"))
        .group_by(InstituteStudent.institute_id)
        .subquery()
    )
    exams = (
        select(InstituteExam.institute_id, func.count(InstituteExam.id).label("n"))
        .group_by(InstituteExam.institute_id)
        .subquery()
    )
    result = await db.execute(
        select(
            Institute,
            func.coalesce(students.c.n, 0),
            func.coalesce(exams.c.n, 0),
        )
        .outerjoin(students, students.c.institute_id == Institute.id)
        .outerjoin(exams, exams.c.institute_id == Institute.id)
        .order_by(Institute.created_at.desc()),
    )
    return [
        {"institute": institute, "student_count": int(s), "exam_count": int(e)}
        for institute, s, e in result.all()
    ]


async def set_institute_active(db: AsyncSession, institute_id: UUID, active: bool) -> Institute:
    institute = await get_institute_or_404(db, institute_id)
    institute.is_active = active
    await db.commit()
    await db.refresh(institute)
    logger.info(
        f"Institute {'activated' if active else 'deactivated'}",
        extra={"institute_id": institute_id},
    )
    return institute
