"""Auth Dependencies — bearer token → profile → device session → role checks.

Invariants:
    - Every authenticated request checks the token's session id against user_sessions
    - Blocked profiles are refused even with a valid token
    - Role checks treat a profile without role rows as a student

Design Decisions:
    - Errors raised as SkillSharpError and rendered by the global handler, never HTTPException
    - The SSE endpoint also accepts ?access_token= because EventSource cannot set headers
    - The SSE endpoint authenticates on a short-lived session; open streams hold no connection
"""

from dataclasses import dataclass

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.core.domain_types import AppRole
from skillsharp.core.errors import (
    AccountBlockedError, AuthenticationRequiredError, ErrorContext, PermissionDeniedError,
)
from skillsharp.core.roles import CONTENT_MANAGERS, has_any_role, parse_roles, resolve_primary_role
from skillsharp.infrastructure import database
from skillsharp.infrastructure.database import get_db
from skillsharp.infrastructure.security import decode_access_token
from skillsharp.models.profile import Profile
from skillsharp.services.user_sessions import verify_session

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    profile: Profile
    session_token: str

    @property
    def id(self):
        return self.profile.id

    @property
    def roles(self) -> set[AppRole]:
        return parse_roles(self.profile.role_names) or {AppRole.STUDENT}

    @property
    def primary_role(self) -> AppRole:
        return resolve_primary_role(self.profile.role_names)

    def has_any(self, *roles: AppRole) -> bool:
        return has_any_role(self.profile.role_names, roles)

    @property
    def is_admin(self) -> bool:
        return AppRole.ADMIN in self.roles

    @property
    def mcq_owner_filter(self):
        """None for admins (see everything), else the caller's id."""
        return None if self.is_admin else self.profile.id


async def _authenticate(db: AsyncSession, token: str | None) -> CurrentUser:
    if not token:
        raise AuthenticationRequiredError()
    claims = decode_access_token(token)
    result = await db.execute(select(Profile).where(Profile.id == claims.user_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise AuthenticationRequiredError("Unknown user")
    if not profile.is_active:
        raise AccountBlockedError(ErrorContext(user_id=str(profile.id)))
    await verify_session(db, profile.id, claims.session_token)
    return CurrentUser(profile=profile, session_token=claims.session_token)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> CurrentUser:
    return await _authenticate(db, credentials.credentials if credentials else None)


async def get_stream_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    access_token: str | None = Query(None),
) -> CurrentUser:
    token = credentials.credentials if credentials else access_token
    if not database.db_manager:
        raise RuntimeError("Database not initialized")
    async with database.db_manager.session() as db:
        return await _authenticate(db, token)


def require_roles(*allowed: AppRole):
    """Dependency factory: 403 unless the caller holds one of `allowed`."""

    async def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if not user.has_any(*allowed):
            raise PermissionDeniedError(
                f"access this resource (requires {', '.join(r.value for r in allowed)})",
                ErrorContext(user_id=str(user.id)),
            )
        return user

    return checker


require_admin = require_roles(AppRole.ADMIN)
require_content_manager = require_roles(*CONTENT_MANAGERS)
require_institute = require_roles(AppRole.INSTITUTE)
