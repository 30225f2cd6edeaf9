"""In-process live notification backend."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections import deque
from uuid import uuid4

from switchboard.realtime.base import LiveCallback, LiveEvent, RealtimeBackend

logger = logging.getLogger("switchboard.realtime")


class InMemoryRealtime(RealtimeBackend):
    """Delivers events to in-process subscribers.

    Each subscription drains its own bounded buffer from a background
    task, so a slow callback never blocks the publisher.  When a buffer is
    full the oldest pending event is dropped.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self._max_queue_size = max_queue_size
        self._subscriptions: dict[str, _Subscriber] = {}
        self._closed = False

    async def publish(self, channel: str, event: LiveEvent) -> None:
        if self._closed:
            return
        for sub in list(self._subscriptions.values()):
            if sub.channel == channel:
                sub.push(event)

    async def subscribe(self, channel: str, callback: LiveCallback) -> str:
        sub_id = uuid4().hex
        sub = _Subscriber(channel, callback, self._max_queue_size)
        self._subscriptions[sub_id] = sub
        sub.start()
        return sub_id

    async def unsubscribe(self, subscription_id: str) -> bool:
        sub = self._subscriptions.pop(subscription_id, None)
        if sub is None:
            return False
        await sub.stop()
        return True

    async def close(self) -> None:
        self._closed = True
        subs = list(self._subscriptions.values())
        self._subscriptions.clear()
        for sub in subs:
            await sub.stop()

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)


class _Subscriber:
    def __init__(self, channel: str, callback: LiveCallback, max_pending: int) -> None:
        self.channel = channel
        self._callback = callback
        self._pending: deque[LiveEvent] = deque(maxlen=max_pending)
        self._wakeup = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    def push(self, event: LiveEvent) -> None:
        self._pending.append(event)
        self._wakeup.set()

    def start(self) -> None:
        self._task = asyncio.create_task(self._drain())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _drain(self) -> None:
        while True:
            await self._wakeup.wait()
            self._wakeup.clear()
            while self._pending:
                event = self._pending.popleft()
                try:
                    await self._callback(event)
                except Exception:
                    logger.exception(
                        "Live callback failed",
                        extra={"channel": self.channel, "event_type": str(event.type)},
                    )
