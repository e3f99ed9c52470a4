"""Device Session Service — register, verify, touch and end the single session per user.

Invariants:
    - register_session replaces any existing row (delete + insert) in one transaction
    - Every row change is published to the realtime broker after commit
    - verify_session is read-only; validate_session also bumps last_active_at

Design Decisions:
    - Events published after commit: listeners never see a change that was rolled back
"""

import logging
import time
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.core.domain_types import SessionEventType
from skillsharp.core.errors import SessionSupersededError, ErrorContext
from skillsharp.core.session_tokens import (
    SessionCheck, check_session_token, generate_session_token,
)
from skillsharp.infrastructure.realtime import SessionEvent, session_events
from skillsharp.models.user_session import UserSession

logger = logging.getLogger(__name__)


async def get_user_session(db: AsyncSession, user_id: UUID) -> UserSession | None:
    result = await db.execute(
        select(UserSession).where(UserSession.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def register_session(
    db: AsyncSession, user_id: UUID, device_info: str,
    session_token: str | None = None,
) -> UserSession:
    """Make a new session the only valid one for the user."""
    token = session_token or generate_session_token(int(time.time() * 1000))
    await db.execute(delete(UserSession).where(UserSession.user_id == user_id))
    row = UserSession(
        user_id=user_id, session_token=token, device_info=device_info,
    )
    db.add(row)
    await db.commit()
    await db.refresh(row)
    session_events.publish(SessionEvent(
        user_id=user_id,
        event_type=SessionEventType.INSERT,
        session_token=token,
        device_info=device_info,
    ))
    logger.info("Session registered", extra={"user_id": user_id})
    return row


async def verify_session(
    db: AsyncSession, user_id: UUID, presented_token: str,
) -> UserSession:
    """Raise SessionSupersededError unless presented_token is the registered one."""
    row = await get_user_session(db, user_id)
    check = check_session_token(row.session_token if row else None, presented_token)
    if check != SessionCheck.VALID:
        logger.info(
            f"Session rejected ({check.value})", extra={"user_id": user_id},
        )
        raise SessionSupersededError(ErrorContext(user_id=str(user_id)))
    return row


async def validate_session(
    db: AsyncSession, user_id: UUID, presented_token: str,
) -> UserSession:
    """verify_session plus a last_active_at heartbeat."""
    row = await verify_session(db, user_id, presented_token)
    row.last_active_at = datetime.now(timezone.utc)
    await db.commit()
    session_events.publish(SessionEvent(
        user_id=user_id,
        event_type=SessionEventType.UPDATE,
        session_token=row.session_token,
        device_info=row.device_info,
    ))
    return row


async def end_session(db: AsyncSession, user_id: UUID) -> bool:
    """Delete the user's session row. Returns False when there was none."""
    result = await db.execute(delete(UserSession).where(UserSession.user_id == user_id))
    await db.commit()
    removed = bool(result.rowcount)
    if removed:
        session_events.publish(SessionEvent(
            user_id=user_id, event_type=SessionEventType.DELETE,
        ))
    logger.info("Session ended", extra={"user_id": user_id})
    return removed
