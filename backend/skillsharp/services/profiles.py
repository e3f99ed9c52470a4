"""Profile Service — self-service profile edits and theme preference."""

from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.models.profile import Profile
from skillsharp.schemas.profile import ProfileUpdate, ThemeUpdate


async def update_profile(db: AsyncSession, profile: Profile, body: ProfileUpdate) -> Profile:
    for field, value in body.model_dump(exclude_unset=True).items():
        if field == "full_name" and value is None:
            continue
        setattr(profile, field, value)
    await db.commit()
    await db.refresh(profile)
    return profile


async def update_theme(db: AsyncSession, profile: Profile, body: ThemeUpdate) -> Profile:
    if body.color_theme is not None:
        profile.color_theme = body.color_theme
    if body.bg_theme is not None:
        profile.bg_theme = body.bg_theme
    await db.commit()
    await db.refresh(profile)
    return profile
