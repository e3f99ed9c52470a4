"""Profile Routes — own profile, premium status and theme preference."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, get_current_user
from skillsharp.api.serializers import profile_dict
from skillsharp.core.themes import BG_THEMES, COLOR_THEMES
from skillsharp.infrastructure.database import get_db
from skillsharp.schemas.profile import ProfileUpdate, ThemeUpdate
from skillsharp.services import profiles

router = APIRouter(prefix="/api/v1/profile", tags=["profile"])


@router.get("")
async def get_profile(user: CurrentUser = Depends(get_current_user)):
    return profile_dict(user.profile)


@router.patch("")
async def update_profile(
    body: ProfileUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return profile_dict(await profiles.update_profile(db, user.profile, body))


@router.get("/themes")
async def theme_catalog(user: CurrentUser = Depends(get_current_user)):
    return {
        "color_themes": COLOR_THEMES,
        "bg_themes": BG_THEMES,
        "current": {
            "color_theme": user.profile.color_theme,
            "bg_theme": user.profile.bg_theme,
        },
    }


@router.put("/theme")
async def update_theme(
    body: ThemeUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await profiles.update_theme(db, user.profile, body)
    return {"color_theme": profile.color_theme, "bg_theme": profile.bg_theme}
