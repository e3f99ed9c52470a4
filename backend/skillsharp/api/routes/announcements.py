"""Announcement Routes — admin CRUD plus the latest-unseen lookup for every user."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, get_current_user, require_admin
from skillsharp.api.serializers import announcement_dict
from skillsharp.infrastructure.database import get_db
from skillsharp.schemas.announcement import AnnouncementCreate, AnnouncementUpdate
from skillsharp.services import announcements

router = APIRouter(prefix="/api/v1/announcements", tags=["announcements"])


@router.get("/latest")
async def latest(
    last_seen_id: UUID | None = Query(None),
    _: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Newest active announcement, or null when last_seen_id already names it."""
    announcement = await announcements.latest_unseen(db, last_seen_id)
    return {"announcement": announcement_dict(announcement) if announcement else None}


@router.get("")
async def list_announcements(
    _: CurrentUser = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    rows = await announcements.list_announcements(db)
    return {"announcements": [announcement_dict(a) for a in rows]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_announcement(
    body: AnnouncementCreate,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return announcement_dict(await announcements.create_announcement(db, body, admin.id))


@router.patch("/{announcement_id}")
async def update_announcement(
    announcement_id: UUID,
    body: AnnouncementUpdate,
    _: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return announcement_dict(
        await announcements.update_announcement(db, announcement_id, body),
    )


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_announcement(
    announcement_id: UUID,
    _: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await announcements.delete_announcement(db, announcement_id)
