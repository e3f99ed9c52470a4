"""Session Events — broker fan-out and the events published by session changes.

Tests cover:
    - publish reaches only the named user's queues
    - A full queue drops the event instead of blocking
    - unsubscribe is idempotent
    - login, heartbeat and logout publish INSERT, UPDATE and DELETE
"""

import asyncio
import uuid

from skillsharp.core.domain_types import SessionEventType
from skillsharp.infrastructure.realtime import (
    QUEUE_MAXSIZE, SessionEvent, SessionEventBroker, format_sse, session_events,
)
from skillsharp.services import user_sessions


def test_publish_reaches_only_that_user():
    broker = SessionEventBroker()
    alice, bob = uuid.uuid4(), uuid.uuid4()
    q1 = broker.subscribe(alice)
    q2 = broker.subscribe(alice)
    q3 = broker.subscribe(bob)

    delivered = broker.publish(SessionEvent(user_id=alice, event_type=SessionEventType.DELETE))
    assert delivered == 2
    assert q1.qsize() == 1 and q2.qsize() == 1
    assert q3.empty()


def test_full_queue_drops_event():
    broker = SessionEventBroker()
    user = uuid.uuid4()
    queue = broker.subscribe(user)
    event = SessionEvent(user_id=user, event_type=SessionEventType.UPDATE)
    for _ in range(QUEUE_MAXSIZE):
        broker.publish(event)
    assert broker.publish(event) == 0
    assert queue.qsize() == QUEUE_MAXSIZE


def test_unsubscribe_is_idempotent():
    broker = SessionEventBroker()
    user = uuid.uuid4()
    queue = broker.subscribe(user)
    broker.unsubscribe(user, queue)
    broker.unsubscribe(user, queue)
    assert broker.subscriber_count(user) == 0
    assert broker.total_subscribers() == 0


def test_format_sse_frame():
    frame = format_sse("session_change", {"event_type": "INSERT"})
    assert frame == 'event: session_change\ndata: {"event_type": "INSERT"}\n\n'


async def test_session_lifecycle_publishes_events(test_db, make_user):
    profile = await make_user("listener@example.com")
    queue = session_events.subscribe(profile.id)
    try:
        row = await user_sessions.register_session(test_db, profile.id, "Desktop - Firefox")
        await user_sessions.validate_session(test_db, profile.id, row.session_token)
        assert await user_sessions.end_session(test_db, profile.id) is True

        events = [await asyncio.wait_for(queue.get(), timeout=1) for _ in range(3)]
        assert [e.event_type for e in events] == [
            SessionEventType.INSERT, SessionEventType.UPDATE, SessionEventType.DELETE,
        ]
        assert events[0].session_token == row.session_token
        assert events[0].device_info == "Desktop - Firefox"
    finally:
        session_events.unsubscribe(profile.id, queue)


async def test_end_session_without_row_publishes_nothing(test_db, make_user):
    profile = await make_user("nobody-home@example.com")
    queue = session_events.subscribe(profile.id)
    try:
        assert await user_sessions.end_session(test_db, profile.id) is False
        assert queue.empty()
    finally:
        session_events.unsubscribe(profile.id, queue)
