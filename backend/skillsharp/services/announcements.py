"""Announcement Service — admin broadcasts and the latest-unseen lookup."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.core.errors import ResourceNotFoundError
from skillsharp.models.announcement import Announcement
from skillsharp.schemas.announcement import AnnouncementCreate, AnnouncementUpdate


async def list_announcements(db: AsyncSession) -> list[Announcement]:
    result = await db.execute(select(Announcement).order_by(Announcement.created_at.desc()))
    return list(result.scalars().all())


async def get_announcement_or_404(db: AsyncSession, announcement_id: UUID) -> Announcement:
    announcement = await db.get(Announcement, announcement_id)
    if not announcement:
        raise ResourceNotFoundError("Announcement", str(announcement_id))
    return announcement


async def create_announcement(
    db: AsyncSession, body: AnnouncementCreate, actor_id: UUID,
) -> Announcement:
    announcement = Announcement(**body.model_dump(), created_by=actor_id)
    db.add(announcement)
    await db.commit()
    await db.refresh(announcement)
    return announcement


async def update_announcement(
    db: AsyncSession, announcement_id: UUID, body: AnnouncementUpdate,
) -> Announcement:
    announcement = await get_announcement_or_404(db, announcement_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(announcement, field, value)
    await db.commit()
    await db.refresh(announcement)
    return announcement


async def delete_announcement(db: AsyncSession, announcement_id: UUID) -> None:
    announcement = await get_announcement_or_404(db, announcement_id)
    await db.delete(announcement)
    await db.commit()


async def latest_unseen(
    db: AsyncSession, last_seen_id: UUID | None = None,
) -> Announcement | None:
    """Newest active announcement, unless it is the one the client saw last."""
    result = await db.execute(
        select(Announcement)
        .where(Announcement.is_active.is_(True))
        .order_by(Announcement.created_at.desc())
        .limit(1),
    )
    latest = result.scalar_one_or_none()
    if latest is None or latest.id == last_seen_id:
        return None
    return latest
