"""Institute Routes — join requests, owner membership management, admin oversight.

Invariants:
    - Owners only ever see and change memberships of their own institute
    - Join requests start unapproved
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import (
    CurrentUser, get_current_user, require_admin, require_institute,
)
from skillsharp.api.serializers import institute_dict, membership_dict, profile_brief
from skillsharp.infrastructure.database import get_db
from skillsharp.schemas.admin import ActiveUpdate
from skillsharp.schemas.institute import JoinInstituteRequest, MembershipDecision
from skillsharp.services import institutes

router = APIRouter(prefix="/api/v1/institutes", tags=["institutes"])


# ─── Student ─────────────────────────────────────────────────────

@router.post("/join", status_code=status.HTTP_201_CREATED)
async def join(
    body: JoinInstituteRequest,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    membership = await institutes.join_institute(db, user.id, body.institute_code)
    return membership_dict(membership)


@router.get("/memberships")
async def my_memberships(
    user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    rows = await institutes.list_student_memberships(db, user.id)
    return {
        "memberships": [
            {**membership_dict(m), "institute": institute_dict(i)} for m, i in rows
        ],
    }


# ─── Owner ───────────────────────────────────────────────────────

@router.get("/owned")
async def owned_institute(
    user: CurrentUser = Depends(require_institute), db: AsyncSession = Depends(get_db),
):
    return institute_dict(await institutes.get_owned_institute(db, user.id))


@router.get("/owned/members")
async def list_members(
    user: CurrentUser = Depends(require_institute), db: AsyncSession = Depends(get_db),
):
    institute = await institutes.get_owned_institute(db, user.id)
    rows = await institutes.list_members(db, institute.id)
    return {
        "members": [
            {**membership_dict(m), "student": profile_brief(p)} for m, p in rows
        ],
        "approved_count": sum(1 for m, _ in rows if m.is_approved),
        "pending_count": sum(1 for m, _ in rows if not m.is_approved),
    }


@router.patch("/owned/members/{membership_id}")
async def decide_membership(
    membership_id: UUID,
    body: MembershipDecision,
    user: CurrentUser = Depends(require_institute),
    db: AsyncSession = Depends(get_db),
):
    institute = await institutes.get_owned_institute(db, user.id)
    membership = await institutes.set_member_approval(
        db, institute.id, membership_id, body.is_approved,
    )
    return membership_dict(membership)


# ─── Admin ───────────────────────────────────────────────────────

@router.get("")
async def list_institutes(
    _: CurrentUser = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    rows = await institutes.list_institutes_with_counts(db)
    return {
        "institutes": [
            {
                **institute_dict(r["institute"]),
                "student_count": r["student_count"],
                "exam_count": r["exam_count"],
            }
            for r in rows
        ],
    }


@router.patch("/{institute_id}")
async def set_active(
    institute_id: UUID,
    body: ActiveUpdate,
    _: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return institute_dict(await institutes.set_institute_active(db, institute_id, body.is_active))
