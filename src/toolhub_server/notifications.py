"""In-memory change notification for registry and session state.

Core managers publish events through a ChangeNotifier instead of exposing
observable fields. Subscribers get an asyncio.Queue and read events at their
own pace; the SSE route in routers/tools.py is one such subscriber.
"""

import asyncio
import logging
import time
from typing import Any

logger = logging.getLogger(__name__)

# Event type constants
EVENT_TOOLS_LOADING = "tools.loading"
EVENT_TOOLS_LOADED = "tools.loaded"
EVENT_TOOLS_ENABLED_CHANGED = "tools.enabled_changed"
EVENT_PROVIDERS_DISCONNECTED = "providers.disconnected"
EVENT_SESSION_CREATED = "session.created"
EVENT_SESSION_INITIALIZED = "session.initialized"
EVENT_SESSION_DELETED = "session.deleted"
EVENT_MESSAGE_ADDED = "session.message_added"


class ChangeNotifier:
    """Broadcasts change events to subscriber queues.

    Publishing never blocks: a subscriber whose queue is full misses the
    event rather than stalling the publisher.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self._subscribers: list[asyncio.Queue[dict[str, Any]]] = []
        self._max_queue_size = max_queue_size

    def publish(self, event: str, **payload: Any) -> None:
        """Publish an event to every subscriber."""
        message = {"event": event, "timestamp": time.time(), **payload}

        for queue in self._subscribers:
            try:
                queue.put_nowait(message)
            except asyncio.QueueFull:
                logger.debug(f"Dropping event {event} for a slow subscriber")

    def subscribe(self) -> asyncio.Queue[dict[str, Any]]:
        """Register a new subscriber and return its queue."""
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(
            maxsize=self._max_queue_size
        )
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[dict[str, Any]]) -> None:
        """Remove a subscriber queue. Idempotent."""
        try:
            self._subscribers.remove(queue)
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
