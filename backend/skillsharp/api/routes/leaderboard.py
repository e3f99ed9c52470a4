"""Leaderboard Route — practice ranking with the caller's own position."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, get_current_user
from skillsharp.config import get_settings
from skillsharp.infrastructure.database import get_db
from skillsharp.services.leaderboard import build_leaderboard

router = APIRouter(prefix="/api/v1/leaderboard", tags=["leaderboard"])


@router.get("")
async def leaderboard(
    user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    top, mine = await build_leaderboard(db, user.id, get_settings().leaderboard_limit)
    return {
        "entries": [e.as_dict() for e in top],
        "current_user": mine.as_dict() if mine else None,
    }
