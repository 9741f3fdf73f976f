"""
SocialConnect Backend — Realtime Notification Hub
===================================================

What:  In-process change feed for the notifications table.
How:   A subscription table keyed by user id, each entry holding one
       asyncio.Queue per connected WebSocket. The notification service
       publishes INSERT/UPDATE events after its transaction commits; the
       WebSocket route drains its queue and forwards each event.
Who:   NotificationService (publisher), routes/notifications.py (subscriber).

Message shape:
    {"event": "INSERT", "table": "notifications", "new": {...notification...}}

Scope:
    The hub lives in one process. Running several uvicorn workers means a
    subscriber only sees events published by its own worker.
"""

import asyncio
import logging
import uuid
from collections import defaultdict
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

INSERT = "INSERT"
UPDATE = "UPDATE"

# Per-connection buffer; a client this far behind is dropping events
QUEUE_MAXSIZE = 100


class NotificationHub:
    """Process-wide subscription table: user id → list of queues."""

    def __init__(self, queue_maxsize: int = QUEUE_MAXSIZE):
        self._queue_maxsize = queue_maxsize
        self._subscriptions: Dict[uuid.UUID, List[asyncio.Queue]] = defaultdict(list)

    def subscribe(self, user_id: uuid.UUID) -> asyncio.Queue:
        """Register a new subscription for the user and return its queue."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_maxsize)
        self._subscriptions[user_id].append(queue)
        logger.info(
            "Realtime subscription opened for user %s (%d active)",
            user_id,
            len(self._subscriptions[user_id]),
        )
        return queue

    def unsubscribe(self, user_id: uuid.UUID, queue: asyncio.Queue) -> None:
        """Remove one subscription; the user's key disappears with the last one."""
        queues = self._subscriptions.get(user_id)
        if not queues:
            return
        try:
            queues.remove(queue)
        except ValueError:
            return
        if not queues:
            del self._subscriptions[user_id]
        logger.info("Realtime subscription closed for user %s", user_id)

    def unsubscribe_all(self) -> None:
        """Drop every subscription (application shutdown)."""
        count = self.subscriber_count()
        self._subscriptions.clear()
        if count:
            logger.info("Closed %d realtime subscriptions", count)

    def subscriber_count(self, user_id: uuid.UUID | None = None) -> int:
        if user_id is not None:
            return len(self._subscriptions.get(user_id, ()))
        return sum(len(queues) for queues in self._subscriptions.values())

    def publish(self, user_id: uuid.UUID, event: str, payload: Dict[str, Any]) -> int:
        """
        Fan an event out to every subscription of one user.

        Returns:
            Number of queues the event was delivered to. Users with no open
            subscription receive nothing, which is not an error.
        """
        queues = self._subscriptions.get(user_id)
        if not queues:
            return 0

        message = {"event": event, "table": "notifications", "new": payload}
        delivered = 0
        for queue in queues:
            try:
                queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning("Realtime queue full for user %s; event dropped", user_id)
        return delivered


# ── Singleton Instance ────────────────────────────────────────────────────
notification_hub = NotificationHub()
