"""Role Resolution — tests for pure primary-role and role-membership rules.

Tests cover:
    - resolve_primary_role precedence admin > institute > content_creator > student
    - Unknown or missing role rows fall back to student
    - has_any_role treats an empty role list as student
"""

from skillsharp.core.domain_types import AppRole
from skillsharp.core.roles import (
    CONTENT_MANAGERS, has_any_role, parse_roles, resolve_primary_role,
)


def test_admin_wins_over_every_other_role():
    assert resolve_primary_role(["student", "institute", "admin"]) == AppRole.ADMIN


def test_institute_wins_over_content_creator():
    assert resolve_primary_role(["content_creator", "institute"]) == AppRole.INSTITUTE


def test_content_creator_wins_over_student():
    assert resolve_primary_role(["student", "content_creator"]) == AppRole.CONTENT_CREATOR


def test_no_roles_resolves_to_student():
    assert resolve_primary_role([]) == AppRole.STUDENT


def test_unknown_roles_are_dropped():
    assert parse_roles(["superuser", "admin"]) == {AppRole.ADMIN}
    assert resolve_primary_role(["superuser"]) == AppRole.STUDENT


def test_has_any_role_matches_allowed_set():
    assert has_any_role(["content_creator"], CONTENT_MANAGERS)
    assert not has_any_role(["student"], CONTENT_MANAGERS)


def test_has_any_role_treats_empty_as_student():
    assert has_any_role([], [AppRole.STUDENT])
    assert not has_any_role([], [AppRole.ADMIN])
