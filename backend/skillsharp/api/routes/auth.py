"""Auth Routes — signup, login/logout, current profile and single-device session checks.

Invariants:
    - Login always registers a fresh device session; older tokens stop working at once
    - /session/validate is the heartbeat: it touches last_active_at and emits UPDATE
    - /session/events streams this user's session changes and closes with
      session_ended when the caller's token is no longer the registered one

Design Decisions:
    - StreamingResponse for SSE with keep-alive comments so proxies keep the connection
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.api.deps import CurrentUser, get_current_user, get_stream_user
from skillsharp.api.serializers import institute_dict, profile_dict
from skillsharp.config import get_settings
from skillsharp.core.session_tokens import should_invalidate
from skillsharp.infrastructure.database import get_db
from skillsharp.infrastructure.realtime import format_sse, session_events
from skillsharp.schemas.auth import (
    ChangePasswordRequest, InstituteSignupRequest, LoginRequest, SignupRequest,
    TokenResponse,
)
from skillsharp.services import accounts
from skillsharp.services.user_sessions import end_session, validate_session

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(body: SignupRequest, db: AsyncSession = Depends(get_db)):
    """Register a student, optionally requesting to join an institute."""
    profile, joined = await accounts.signup_student(db, body)
    return {"user": profile_dict(profile), "institute_joined": joined}


@router.post("/institute-signup", status_code=status.HTTP_201_CREATED)
async def institute_signup(
    body: InstituteSignupRequest, db: AsyncSession = Depends(get_db),
):
    profile, institute = await accounts.signup_institute(db, body)
    return {"user": profile_dict(profile), "institute": institute_dict(institute)}


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest, request: Request, db: AsyncSession = Depends(get_db),
):
    result = await accounts.login(
        db, body.email, body.password, request.headers.get("user-agent"),
    )
    return result.as_dict()


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    await end_session(db, user.id)


@router.get("/me")
async def me(user: CurrentUser = Depends(get_current_user)):
    return profile_dict(user.profile)


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    body: ChangePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await accounts.change_password(db, user.profile, body.current_password, body.new_password)


@router.get("/session/validate")
async def validate(
    user: CurrentUser = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    """Heartbeat: confirm this device still owns the session."""
    row = await validate_session(db, user.id, user.session_token)
    return {
        "valid": True,
        "device_info": row.device_info,
        "last_active_at": row.last_active_at.isoformat(),
    }


@router.get("/session/events")
async def session_event_stream(
    request: Request, user: CurrentUser = Depends(get_stream_user),
):
    """SSE stream of the caller's session changes."""
    keepalive = get_settings().session_events_keepalive_seconds
    queue = session_events.subscribe(user.id)

    async def event_generator():
        try:
            yield format_sse("connected", {"user_id": str(user.id)})
            while True:
                if await request.is_disconnected():
                    break
                try:
                    event = await asyncio.wait_for(queue.get(), timeout=keepalive)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue
                payload = event.to_dict()
                payload.pop("session_token", None)
                yield format_sse("session_change", payload)
                if should_invalidate(event.event_type, user.session_token, event.session_token):
                    yield format_sse("session_ended", {
                        "reason": "superseded",
                        "message": "Your session was ended because you logged in from another device.",
                        "device_info": event.device_info,
                    })
                    break
        finally:
            session_events.unsubscribe(user.id, queue)
            logger.info("Session event stream closed", extra={"user_id": user.id})

    return StreamingResponse(
        event_generator(), media_type="text/event-stream", headers=_SSE_HEADERS,
    )
