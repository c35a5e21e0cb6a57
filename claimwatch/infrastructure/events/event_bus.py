"""In-process event bus implementing the event publisher port."""

import asyncio
import logging
import time
from collections import defaultdict
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class InMemoryEventBus:
    """Fans each published payload out to every subscriber queue of its topic.

    Queues are unbounded, so publishing never blocks on a slow subscriber.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[asyncio.Queue]] = defaultdict(list)

    def subscribe(self, topic: str) -> asyncio.Queue:
        """Queue that receives every envelope published on ``topic`` from now on."""
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers[topic].append(queue)
        return queue

    def unsubscribe(self, topic: str, queue: asyncio.Queue) -> None:
        queues = self._subscribers.get(topic, [])
        if queue in queues:
            queues.remove(queue)
        if not queues:
            self._subscribers.pop(topic, None)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, []))

    async def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        """Deliver ``{topic, publishedAt, payload}`` to each subscriber of ``topic``.

        Args:
            topic: Topic name, e.g. ``analysis:{claim_id}``
            payload: Event body; copied into the envelope
        """
        envelope = {"topic": topic, "publishedAt": time.time(), "payload": dict(payload or {})}
        queues = list(self._subscribers.get(topic, []))
        for queue in queues:
            queue.put_nowait(envelope)
        logger.debug(f"📣 Published {payload.get('event', 'event')} on {topic} to {len(queues)} subscribers")
