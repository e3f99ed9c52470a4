"""Session Event Broker — in-process pub/sub for user_sessions row changes.

Invariants:
    - Subscribers are keyed by user id; a publish only reaches that user's queues
    - publish never blocks: a full subscriber queue drops the event and logs a warning
    - unsubscribe is idempotent

Design Decisions:
    - asyncio.Queue per subscriber: the SSE route awaits its own queue
    - Single-process broker (module singleton like db_manager); multi-worker
      deployments need an external bus, which is out of scope
"""

import asyncio
import json
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

from skillsharp.core.domain_types import SessionEventType

logger = logging.getLogger(__name__)

QUEUE_MAXSIZE = 100


@dataclass(frozen=True)
class SessionEvent:
    user_id: UUID
    event_type: SessionEventType
    session_token: str | None = None
    device_info: str | None = None
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type.value,
            "session_token": self.session_token,
            "device_info": self.device_info,
            "occurred_at": self.occurred_at.isoformat(),
        }


def format_sse(event: str, data: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


class SessionEventBroker:
    """Fan-out of session change events to per-user subscriber queues."""

    def __init__(self) -> None:
        self._subscribers: dict[UUID, set[asyncio.Queue]] = defaultdict(set)

    def subscribe(self, user_id: UUID) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=QUEUE_MAXSIZE)
        self._subscribers[user_id].add(queue)
        return queue

    def unsubscribe(self, user_id: UUID, queue: asyncio.Queue) -> None:
        queues = self._subscribers.get(user_id)
        if not queues:
            return
        queues.discard(queue)
        if not queues:
            self._subscribers.pop(user_id, None)

    def subscriber_count(self, user_id: UUID) -> int:
        return len(self._subscribers.get(user_id, ()))

    def total_subscribers(self) -> int:
        return sum(len(queues) for queues in self._subscribers.values())

    def publish(self, event: SessionEvent) -> int:
        """Deliver to every subscriber of event.user_id. Returns delivered count."""
        delivered = 0
        for queue in list(self._subscribers.get(event.user_id, ())):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(
                    "Session event dropped: subscriber queue full",
                    extra={"user_id": event.user_id},
                )
        return delivered


session_events = SessionEventBroker()
