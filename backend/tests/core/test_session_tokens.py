"""Single-Device Session Rules — tests for token generation, device labels and supersession.

Tests cover:
    - Token format "<epoch-millis>-<13 base36 chars>"
    - describe_device labels mobile/desktop and the browser family
    - check_session_token distinguishes valid, superseded and missing
    - should_invalidate decisions for INSERT/UPDATE/DELETE events
"""

import re

from skillsharp.core.domain_types import SessionEventType
from skillsharp.core.session_tokens import (
    SessionCheck, check_session_token, describe_device, generate_session_token,
    should_invalidate,
)


# ─── generate_session_token ─────────────────────────────────────

def test_token_has_millis_prefix_and_base36_suffix():
    token = generate_session_token(1700000000123)
    assert re.fullmatch(r"1700000000123-[0-9a-z]{13}", token)


def test_tokens_for_same_instant_differ():
    assert generate_session_token(1) != generate_session_token(1)


# ─── describe_device ─────────────────────────────────────────────

def test_desktop_chrome():
    ua = "Mozilla/5.0 (Windows NT 10.0) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"
    assert describe_device(ua) == "Desktop - Chrome"


def test_iphone_safari_is_mobile():
    ua = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0) AppleWebKit/605.1.15 Safari/604.1"
    assert describe_device(ua) == "Mobile - Safari"


def test_missing_user_agent():
    assert describe_device(None) == "Desktop - Unknown"


# ─── check_session_token ────────────────────────────────────────

def test_matching_token_is_valid():
    assert check_session_token("1-abc", "1-abc") == SessionCheck.VALID


def test_different_token_is_superseded():
    assert check_session_token("2-new", "1-old") == SessionCheck.SUPERSEDED


def test_no_stored_row_is_missing():
    assert check_session_token(None, "1-old") == SessionCheck.MISSING


# ─── should_invalidate ──────────────────────────────────────────

def test_insert_with_other_token_invalidates():
    assert should_invalidate(SessionEventType.INSERT, "1-old", "2-new")


def test_update_with_same_token_keeps_listener():
    assert not should_invalidate(SessionEventType.UPDATE, "1-old", "1-old")


def test_delete_always_invalidates_a_listener():
    assert should_invalidate(SessionEventType.DELETE, "1-old", None)


def test_listener_without_token_is_never_invalidated():
    assert not should_invalidate(SessionEventType.DELETE, None, None)
    assert not should_invalidate(SessionEventType.INSERT, "", "2-new")


def test_insert_without_new_token_is_ignored():
    assert not should_invalidate(SessionEventType.INSERT, "1-old", None)
