"""
Fan-out of change notifications to live-update subscribers.

Delivery is best effort: each subscriber owns a bounded queue and a message
is dropped for a subscriber whose queue is full.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Set

logger = logging.getLogger(__name__)

POSTS_UPDATED = "posts-updated"
STATS = "stats"

# Pushed to every queue on shutdown; consumers stop when they see it.
CLOSE = None


class Broadcaster:
    def __init__(self, queue_size: int = 100):
        self.queue_size = queue_size
        self._subscribers: Set[asyncio.Queue] = set()
        self.messages_broadcast = 0

    @property
    def connected_clients(self) -> int:
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.add(queue)
        logger.info("Client connected", extra={"data": {"totalClients": self.connected_clients}})
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.discard(queue)
            logger.info("Client disconnected", extra={"data": {"totalClients": self.connected_clients}})

    def broadcast(self, event: str, data: Any) -> int:
        """Queue an event for every subscriber; returns how many accepted it."""
        message = {"event": event, "data": data}
        delivered = 0

        for queue in list(self._subscribers):
            try:
                queue.put_nowait(message)
                delivered += 1
            except asyncio.QueueFull:
                logger.warning(f"Subscriber queue full, dropping {event}")

        self.messages_broadcast += 1
        return delivered

    def notify_updated(self, count: int, timestamp: Optional[datetime] = None) -> int:
        timestamp = timestamp or datetime.now(timezone.utc)
        payload: Dict[str, Any] = {"count": count, "timestamp": timestamp.isoformat()}
        return self.broadcast(POSTS_UPDATED, payload)

    def close(self) -> None:
        for queue in list(self._subscribers):
            try:
                queue.put_nowait(CLOSE)
            except asyncio.QueueFull:
                # Make room so the consumer still sees the sentinel.
                queue.get_nowait()
                queue.put_nowait(CLOSE)
        self._subscribers.clear()
