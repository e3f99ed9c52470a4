"""Account Service — signup, login, password change and role grants.

Invariants:
    - Every new profile gets exactly the role its signup path implies
    - Login on a blocked profile never registers a session
    - Student signup with an unknown institute code still creates the account
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from skillsharp.core.codes import generate_institute_code
from skillsharp.core.domain_types import AppRole
from skillsharp.core.errors import (
    AccountBlockedError, BusinessRuleError, ConflictError, ErrorContext,
    InvalidCredentialsError, ResourceNotFoundError,
)
from skillsharp.core.roles import resolve_primary_role
from skillsharp.core.session_tokens import describe_device
from skillsharp.infrastructure.security import (
    create_access_token, hash_password, verify_password,
)
from skillsharp.models.institute import Institute, InstituteStudent
from skillsharp.models.profile import Profile, UserRole
from skillsharp.schemas.auth import InstituteSignupRequest, SignupRequest
from skillsharp.services.user_sessions import register_session

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

_CODE_ATTEMPTS = 5


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    expires_at: str
    user_id: UUID
    role: AppRole
    device_info: str

    def as_dict(self) -> dict:
        return {
            "access_token": self.access_token,
            "token_type": "bearer",
            "expires_at": self.expires_at,
            "user_id": str(self.user_id),
            "role": self.role.value,
            "device_info": self.device_info,
        }


async def get_profile_by_email(db: AsyncSession, email: str) -> Profile | None:
    result = await db.execute(select(Profile).where(Profile.email == email.lower()))
    return result.scalar_one_or_none()


async def get_profile_or_404(db: AsyncSession, user_id: UUID) -> Profile:
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    profile = result.scalar_one_or_none()
    if not profile:
        raise ResourceNotFoundError("User", str(user_id))
    return profile


async def _ensure_email_free(db: AsyncSession, email: str) -> None:
    if await get_profile_by_email(db, email):
        raise ConflictError("An account with this email already exists", "EMAIL_TAKEN")


async def unique_institute_code(db: AsyncSession) -> str:
    for _ in range(_CODE_ATTEMPTS):
        code = generate_institute_code()
        taken = await db.execute(
            select(Institute.id).where(Institute.institute_code == code),
        )
        if taken.scalar_one_or_none() is None:
            return code
    raise ConflictError("Could not allocate an institute code", "CODE_EXHAUSTED")


async def signup_student(db: AsyncSession, body: SignupRequest) -> tuple[Profile, bool]:
    """Create a student. Returns (profile, institute_joined)."""
    await _ensure_email_free(db, body.email)
    profile = Profile(
        email=body.email,
        password_hash=hash_password(body.password),
        full_name=body.full_name,
        mobile_number=body.mobile_number,
        roles=[UserRole(role=AppRole.STUDENT.value)],
    )
    db.add(profile)
    await db.flush()

    joined = False
    if body.institute_code:
        result = await db.execute(
            select(Institute).where(
                Institute.institute_code == body.institute_code,
                Institute.is_active.is_(True),
            ),
        )
        institute = result.scalar_one_or_none()
        if institute:
            db.add(InstituteStudent(
                institute_id=institute.id, student_id=profile.id, is_approved=False,
            ))
            joined = True
        else:
            logger.info(
                "Signup with unknown institute code", extra={"user_id": profile.id},
            )
    await db.commit()
    await db.refresh(profile)
    logger.info("Student signed up", extra={"user_id": profile.id})
    return profile, joined


async def signup_institute(
    db: AsyncSession, body: InstituteSignupRequest,
) -> tuple[Profile, Institute]:
    """Create the institute owner account and its institute record."""
    await _ensure_email_free(db, body.email)
    profile = Profile(
        email=body.email,
        password_hash=hash_password(body.password),
        full_name=body.name,
        roles=[UserRole(role=AppRole.INSTITUTE.value)],
    )
    db.add(profile)
    await db.flush()
    institute = Institute(
        name=body.name,
        email=body.email,
        institute_code=await unique_institute_code(db),
        created_by=profile.id,
    )
    db.add(institute)
    await db.commit()
    await db.refresh(profile)
    await db.refresh(institute)
    logger.info(
        "Institute registered",
        extra={"user_id": profile.id, "institute_id": institute.id},
    )
    return profile, institute


async def login(
    db: AsyncSession, email: str, password: str, user_agent: str | None,
) -> LoginResult:
    """Check credentials, register a fresh device session and issue a token."""
    profile = await get_profile_by_email(db, email)
    if not profile or not verify_password(password, profile.password_hash):
        raise InvalidCredentialsError()
    if not profile.is_active:
        raise AccountBlockedError(ErrorContext(user_id=str(profile.id)))

    device_info = describe_device(user_agent)
    session = await register_session(db, profile.id, device_info)
    token, expires_at = create_access_token(profile.id, session.session_token)
    return LoginResult(
        access_token=token,
        expires_at=expires_at.isoformat(),
        user_id=profile.id,
        role=resolve_primary_role(profile.role_names),
        device_info=device_info,
    )


async def change_password(
    db: AsyncSession, profile: Profile, current_password: str, new_password: str,
) -> None:
    if not verify_password(current_password, profile.password_hash):
        raise InvalidCredentialsError()
    profile.password_hash = hash_password(new_password)
    await db.commit()


async def set_role(
    db: AsyncSession, profile: Profile, role: AppRole, granted: bool,
) -> Profile:
    """Grant or revoke one role. Idempotent in both directions."""
    current = {r.role: r for r in profile.roles}
    if granted and role.value not in current:
        profile.roles.append(UserRole(role=role.value))
    elif not granted and role.value in current:
        profile.roles.remove(current[role.value])
    await db.commit()
    await db.refresh(profile)
    return profile


async def ensure_admin(
    db: AsyncSession, email: str, password: str | None, full_name: str | None = None,
) -> tuple[Profile, bool]:
    """Create an admin profile, or grant admin to an existing one. Returns (profile, created).

    An existing account keeps its password; `password` only applies to new accounts.
    """
    profile = await get_profile_by_email(db, email)
    if profile:
        return await set_role(db, profile, AppRole.ADMIN, True), False
    if not password:
        raise ConflictError("A password is required for a new admin", "PASSWORD_REQUIRED")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise BusinessRuleError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "PASSWORD_TOO_SHORT",
        )
    profile = Profile(
        email=email.strip().lower(),
        password_hash=hash_password(password),
        full_name=full_name,
        roles=[UserRole(role=AppRole.ADMIN.value)],
    )
    db.add(profile)
    await db.commit()
    await db.refresh(profile)
    logger.info("Admin created", extra={"user_id": profile.id})
    return profile, True
