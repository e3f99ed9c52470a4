"""Leaderboard Service — practice-attempt aggregates ranked across all students."""

from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.core.rankings import LeaderboardEntry, find_entry, rank_entries
from skillsharp.models.attempt import TestAttempt
from skillsharp.models.profile import Profile


async def build_leaderboard(
    db: AsyncSession, viewer_id: UUID, limit: int,
) -> tuple[list[LeaderboardEntry], LeaderboardEntry | None]:
    """Top `limit` entries plus the viewer's own entry (None if no attempts)."""
    result = await db.execute(
        select(
            Profile.id,
            Profile.full_name,
            Profile.email,
            func.count(TestAttempt.id),
            func.coalesce(func.sum(TestAttempt.score), 0),
            func.avg(TestAttempt.percentage),
        )
        .join(TestAttempt, TestAttempt.student_id == Profile.id)
        .group_by(Profile.id, Profile.full_name, Profile.email),
    )
    ranked = rank_entries(
        LeaderboardEntry(
            user_id=str(user_id),
            full_name=full_name or "",
            email=email,
            total_attempts=int(attempts),
            total_score=int(total_score),
            avg_score=float(avg or 0.0),
        )
        for user_id, full_name, email, attempts, total_score, avg in result.all()
    )
    return ranked[:limit], find_entry(ranked, str(viewer_id))
