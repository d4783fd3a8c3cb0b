"""
In-process publish/subscribe for realtime notifications.

Topics are ``match:<match_id>`` and ``user:<user_id>``. Each subscriber owns a
bounded `asyncio.Queue`; `publish` never blocks, and an event that does not fit
in a full queue is dropped for that subscriber. There is no replay: a client
that reconnects only sees events published after it subscribed, and refetches
state over HTTP.

Event types
-----------
match.created, match.updated, message.created, request.created,
request.updated, credits.updated
"""

import asyncio
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Set
from uuid import UUID

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 100


def match_topic(match_id) -> str:
    return f"match:{match_id}"


def user_topic(user_id) -> str:
    return f"user:{user_id}"


class EventBroker:
    """Fan-out of events to the queues subscribed to a topic."""

    def __init__(self, max_queue_size: int = DEFAULT_QUEUE_SIZE):
        self.max_queue_size = max_queue_size
        self.subscribers: Dict[str, Set[asyncio.Queue]] = {}

    def subscribe(self, *topics: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.max_queue_size)
        for topic in topics:
            self.subscribers.setdefault(topic, set()).add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue, *topics: str) -> None:
        for topic in topics:
            queues = self.subscribers.get(topic)
            if queues is None:
                continue
            queues.discard(queue)
            if not queues:
                del self.subscribers[topic]

    @contextmanager
    def subscription(self, *topics: str):
        """Subscribe for the duration of a ``with`` block."""
        queue = self.subscribe(*topics)
        try:
            yield queue
        finally:
            self.unsubscribe(queue, *topics)

    def publish(self, topic: str, event_type: str, payload: Any) -> int:
        """
        Deliver an event to every current subscriber of `topic`.

        Returns the number of queues that accepted it.
        """
        event = {
            "type": event_type,
            "topic": topic,
            "payload": payload,
            "sent_at": datetime.now(timezone.utc).isoformat(),
        }
        delivered = 0
        for queue in list(self.subscribers.get(topic, ())):
            try:
                queue.put_nowait(event)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("Dropping %s on %s: subscriber queue full", event_type, topic)
        return delivered

    def publish_to_users(self, user_ids: Iterable, event_type: str, payload: Any) -> int:
        return sum(self.publish(user_topic(uid), event_type, payload) for uid in user_ids)


broker = EventBroker()
"""Process-wide broker used by the routers and the websocket endpoints."""


def notify_match(match: dict, event_type: str = "match.updated") -> None:
    """Publish a match change to its topic and to both participants."""
    broker.publish(match_topic(match["id"]), event_type, match)
    broker.publish_to_users((match["user1_id"], match["user2_id"]), event_type, match)


def notify_credits(user_id: UUID, balance: int) -> None:
    broker.publish(user_topic(user_id), "credits.updated", {"balance": balance})
