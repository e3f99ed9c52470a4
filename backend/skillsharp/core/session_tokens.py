"""Single-Device Session Rules — pure token generation and supersession checks.

Invariants:
    - Token format is "<epoch-millis>-<13 char base36 suffix>"
    - check_session_token never mutates; the shell decides what to write
    - should_invalidate is the only rule realtime listeners apply

Design Decisions:
    - A missing row counts as superseded: sign-out and login-elsewhere both remove
      the listener's row, so the stale token must stop working either way
"""

import re
import secrets
import string
from enum import Enum

from skillsharp.core.domain_types import SessionEventType


_BASE36 = string.digits + string.ascii_lowercase
_SUFFIX_LENGTH = 13
_MOBILE_PATTERN = re.compile(r"Mobile|Android|iPhone|iPad")
_BROWSER_PATTERN = re.compile(r"(Chrome|Safari|Firefox|Edge|Opera)")


class SessionCheck(str, Enum):
    VALID = "valid"
    SUPERSEDED = "superseded"
    MISSING = "missing"


def generate_session_token(now_ms: int) -> str:
    """Build a fresh session token for a login at now_ms."""
    suffix = "".join(secrets.choice(_BASE36) for _ in range(_SUFFIX_LENGTH))
    return f"{now_ms}-{suffix}"


def describe_device(user_agent: str | None) -> str:
    """Short human label for the device behind a User-Agent header."""
    ua = user_agent or ""
    kind = "Mobile" if _MOBILE_PATTERN.search(ua) else "Desktop"
    match = _BROWSER_PATTERN.search(ua)
    browser = match.group(1) if match else "Unknown"
    return f"{kind} - {browser}"


def check_session_token(stored_token: str | None, presented_token: str) -> SessionCheck:
    """Compare the registered token with the one a client presents."""
    if stored_token is None:
        return SessionCheck.MISSING
    if not secrets.compare_digest(stored_token, presented_token):
        return SessionCheck.SUPERSEDED
    return SessionCheck.VALID


def should_invalidate(
    event_type: SessionEventType,
    listener_token: str | None,
    new_token: str | None,
) -> bool:
    """Decide whether a change on the user's session row ends the listener's session."""
    if not listener_token:
        return False
    if event_type == SessionEventType.DELETE:
        return True
    return bool(new_token) and new_token != listener_token
