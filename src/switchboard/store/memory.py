"""In-memory implementation of ContextStore."""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Callable
from datetime import timedelta

from switchboard.core.clock import Clock, SystemClock
from switchboard.orchestration.state import ConversationContext
from switchboard.store.base import ContextStore

logger = logging.getLogger("switchboard.store")


class InMemoryContextStore(ContextStore):
    """Dict-based bounded cache of conversation contexts.

    Entries are ordered by last write.  When ``max_contexts`` is set and
    exceeded, the least recently written contexts are dropped.  Idle-time
    eviction uses each context's ``last_activity`` against the injected
    clock, so sweeps can be tested without real time passing.

    ``on_evict`` is called with the user id of every context dropped for
    capacity, so per-user state kept elsewhere can be released with it.
    It runs without that user's lock.

    None of the methods await, so each call is atomic on the event loop.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        max_contexts: int | None = None,
        on_evict: Callable[[str], None] | None = None,
    ) -> None:
        if max_contexts is not None and max_contexts < 1:
            raise ValueError("max_contexts must be positive")
        self._clock = clock or SystemClock()
        self._max_contexts = max_contexts
        self._on_evict = on_evict
        self._contexts: OrderedDict[str, ConversationContext] = OrderedDict()

    async def get(self, user_id: str) -> ConversationContext | None:
        return self._contexts.get(user_id)

    async def get_or_create(self, user_id: str) -> ConversationContext:
        context = self._contexts.get(user_id)
        if context is not None:
            return context
        now = self._clock.now()
        context = ConversationContext(user_id=user_id, created_at=now, last_activity=now)
        self._write(user_id, context)
        logger.debug("Created context", extra={"user_id": user_id})
        return context

    async def put(self, user_id: str, context: ConversationContext) -> ConversationContext:
        if context.user_id != user_id:
            raise ValueError(f"Context belongs to {context.user_id!r}, not {user_id!r}")
        self._write(user_id, context)
        return context

    async def delete(self, user_id: str) -> bool:
        return self._contexts.pop(user_id, None) is not None

    async def sweep_older_than(self, max_idle: timedelta) -> int:
        stale = self._idle(max_idle)
        for user_id in stale:
            del self._contexts[user_id]
        if stale:
            logger.info("Swept %d idle contexts", len(stale), extra={"max_idle": str(max_idle)})
        return len(stale)

    async def idle_user_ids(self, max_idle: timedelta) -> list[str]:
        return self._idle(max_idle)

    async def list_user_ids(self) -> list[str]:
        return list(self._contexts)

    async def count(self) -> int:
        return len(self._contexts)

    def _idle(self, max_idle: timedelta) -> list[str]:
        now = self._clock.now()
        return [
            user_id
            for user_id, context in self._contexts.items()
            if context.idle_for(now) > max_idle
        ]

    def _write(self, user_id: str, context: ConversationContext) -> None:
        self._contexts[user_id] = context
        self._contexts.move_to_end(user_id)
        if self._max_contexts is None:
            return
        while len(self._contexts) > self._max_contexts:
            evicted, _ = self._contexts.popitem(last=False)
            logger.info("Evicted context over capacity", extra={"user_id": evicted})
            if self._on_evict is not None:
                self._on_evict(evicted)
