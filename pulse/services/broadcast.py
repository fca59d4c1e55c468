"""
Live fan-out of tenant events to SSE subscribers.

A ``Subscriber`` is a bounded queue of already-framed SSE messages. The
streaming endpoint drains it; the hub fills it. Writes are non-blocking, so
publishing never waits on a slow client: a full queue counts as a failed
delivery and the subscriber is dropped like a disconnected one.
"""

import asyncio
import itertools
import json
import logging
from typing import Any, Dict, List, Optional

from ..config import SUBSCRIBER_QUEUE_MAX
from ..errors import DeliveryError
from ..logging_config import mask_token
from ..metrics import DELIVERY_FAILURES_TOTAL, EVENTS_PUBLISHED_TOTAL, SUBSCRIBERS
from .store import TenantStore

logger = logging.getLogger("pulse")

_subscriber_ids = itertools.count(1)


def format_sse(event: str, data: Any) -> str:
    """Frame one SSE message: a named event with a single-line JSON payload"""
    # json.dumps escapes control characters, so the payload never spans lines
    return f"event: {event}\ndata: {json.dumps(data, separators=(',', ':'), default=str)}\n\n"


class Subscriber:
    """One open live stream belonging to a single tenant"""

    def __init__(self, token: str, maxsize: int = SUBSCRIBER_QUEUE_MAX):
        self.id = next(_subscriber_ids)
        self.token = token
        self.closed = False
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)

    def send(self, message: str) -> None:
        if self.closed:
            raise DeliveryError(f"subscriber {self.id} is closed")
        try:
            self._queue.put_nowait(message)
        except asyncio.QueueFull:
            raise DeliveryError(f"subscriber {self.id} queue full") from None

    async def get(self) -> str:
        return await self._queue.get()

    def get_nowait(self) -> str:
        return self._queue.get_nowait()

    def pending(self) -> int:
        return self._queue.qsize()

    def close(self) -> None:
        self.closed = True

    def __repr__(self) -> str:
        return f"Subscriber(id={self.id}, closed={self.closed})"


class BroadcastHub:

    def __init__(self, queue_maxsize: int = SUBSCRIBER_QUEUE_MAX):
        self.queue_maxsize = queue_maxsize

    def publish(self, store: TenantStore, event_kind: str, payload: Dict[str, Any]) -> int:
        """
        Deliver one event to every current subscriber of ``store``.

        Holding the tenant lock for the whole loop keeps per-subscriber order
        equal to publish order. Failed subscribers are removed after the loop;
        the failure never reaches the caller. Returns the number of deliveries.
        """
        message = format_sse(event_kind, payload)
        delivered = 0
        failed: List[Subscriber] = []
        with store.lock:
            for channel in store.subscribers():
                try:
                    channel.send(message)
                    delivered += 1
                except DeliveryError as e:
                    DELIVERY_FAILURES_TOTAL.inc()
                    logger.warning("live delivery failed", extra={
                        "component": "broadcast",
                        "tenant": mask_token(store.token),
                        "event_kind": event_kind,
                        "subscriber": channel.id,
                        "error": str(e),
                    })
                    failed.append(channel)
            for channel in failed:
                self.unsubscribe(store, channel, reason="delivery_failed")
        EVENTS_PUBLISHED_TOTAL.labels(kind=event_kind).inc()
        return delivered

    def send_bootstrap(self, store: TenantStore, channel: Subscriber, snapshot: Dict[str, Any]) -> None:
        with store.lock:
            channel.send(format_sse("bootstrap", snapshot))

    def subscribe(self, store: TenantStore, snapshot: Dict[str, Any],
                  channel: Optional[Subscriber] = None) -> Subscriber:
        """Register a new live stream; its first message is the bootstrap snapshot"""
        channel = channel or Subscriber(store.token, maxsize=self.queue_maxsize)
        with store.lock:
            self.send_bootstrap(store, channel, snapshot)
            store.add_subscriber(channel)
            count = store.subscriber_count()
        SUBSCRIBERS.inc()
        logger.info("live subscriber connected", extra={
            "component": "broadcast",
            "tenant": mask_token(store.token),
            "subscriber": channel.id,
            "active": count,
        })
        return channel

    def unsubscribe(self, store: TenantStore, channel: Subscriber, reason: str = "disconnect") -> bool:
        """Close and drop ``channel``; safe to call any number of times"""
        channel.close()
        with store.lock:
            removed = store.remove_subscriber(channel)
            remaining = store.subscriber_count()
        if removed:
            SUBSCRIBERS.dec()
            logger.info("live subscriber disconnected", extra={
                "component": "broadcast",
                "tenant": mask_token(store.token),
                "subscriber": channel.id,
                "reason": reason,
                "active": remaining,
            })
        return removed
