"""Role Resolution — pure rules mapping a profile's role rows to one effective role.

Invariants:
    - Precedence is admin > institute > content_creator > student
    - No role rows (or only unknown ones) resolves to student
"""

from collections.abc import Iterable

from skillsharp.core.domain_types import AppRole


ROLE_PRECEDENCE: tuple[AppRole, ...] = (
    AppRole.ADMIN,
    AppRole.INSTITUTE,
    AppRole.CONTENT_CREATOR,
    AppRole.STUDENT,
)

CONTENT_MANAGERS: frozenset[AppRole] = frozenset({AppRole.ADMIN, AppRole.CONTENT_CREATOR})


def parse_roles(raw_roles: Iterable[str]) -> set[AppRole]:
    """Convert stored role strings to AppRole, dropping unknown values."""
    roles = set()
    for raw in raw_roles:
        try:
            roles.add(AppRole(raw))
        except ValueError:
            continue
    return roles


def resolve_primary_role(raw_roles: Iterable[str]) -> AppRole:
    """Pick the highest-precedence role the profile holds."""
    roles = parse_roles(raw_roles)
    for role in ROLE_PRECEDENCE:
        if role in roles:
            return role
    return AppRole.STUDENT


def has_any_role(raw_roles: Iterable[str], allowed: Iterable[AppRole]) -> bool:
    """True when the profile holds at least one of the allowed roles.

    A profile without role rows counts as a student.
    """
    roles = parse_roles(raw_roles) or {AppRole.STUDENT}
    return bool(roles & set(allowed))
