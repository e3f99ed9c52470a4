"""Security Primitives — bcrypt password hashing and HS256 bearer tokens.

Invariants:
    - Plain passwords never stored or logged
    - Access tokens carry sub (user id), sid (session token), iat and exp
    - decode_access_token raises AuthenticationRequiredError for every failure mode

Design Decisions:
    - The sid claim ties a bearer token to one registered device session; the API
      layer compares it with user_sessions on every request
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
import jwt

from skillsharp.config import get_settings
from skillsharp.core.errors import AuthenticationRequiredError


def hash_password(password: str) -> str:
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


@dataclass(frozen=True)
class TokenClaims:
    user_id: UUID
    session_token: str
    expires_at: datetime


def create_access_token(
    user_id: UUID, session_token: str, now: datetime | None = None,
) -> tuple[str, datetime]:
    settings = get_settings()
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(minutes=settings.access_token_ttl_minutes)
    payload = {
        "sub": str(user_id),
        "sid": session_token,
        "iat": issued_at,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_access_token(token: str) -> TokenClaims:
    settings = get_settings()
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationRequiredError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationRequiredError("Invalid token")

    try:
        user_id = UUID(payload["sub"])
        session_token = str(payload["sid"])
    except (KeyError, ValueError, TypeError):
        raise AuthenticationRequiredError("Malformed token")
    return TokenClaims(
        user_id=user_id,
        session_token=session_token,
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )
