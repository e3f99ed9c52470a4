"""Admin Routes — user management and dashboard counts."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, require_admin
from skillsharp.api.serializers import profile_dict
from skillsharp.core.domain_types import AppRole
from skillsharp.infrastructure.database import get_db
from skillsharp.schemas.admin import ActiveUpdate, RoleUpdate
from skillsharp.services import accounts, admin as admin_service

router = APIRouter(prefix="/api/v1/admin", tags=["admin"])


@router.get("/dashboard")
async def dashboard(
    _: CurrentUser = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    return await admin_service.dashboard_counts(db)


@router.get("/users")
async def list_users(
    search: str | None = Query(None, max_length=200),
    _: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    users = await admin_service.list_users(db, search)
    return {"users": [profile_dict(u) for u in users], "total": len(users)}


@router.patch("/users/{user_id}/active")
async def set_active(
    user_id: UUID,
    body: ActiveUpdate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Block or unblock a user. Blocking also ends their device session."""
    profile = await admin_service.set_user_active(db, user_id, body.is_active, admin.id)
    return profile_dict(profile)


@router.patch("/users/{user_id}/roles")
async def set_role(
    user_id: UUID,
    body: RoleUpdate,
    _: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    profile = await accounts.get_profile_or_404(db, user_id)
    profile = await accounts.set_role(db, profile, AppRole(body.role), body.granted)
    return profile_dict(profile)
