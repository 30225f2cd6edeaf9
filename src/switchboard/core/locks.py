"""Per-user turn locks."""

from __future__ import annotations

import asyncio
import contextvars
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

# Users whose lock the running task (or the task that gathered it) holds.
_held_keys: contextvars.ContextVar[frozenset[str]] = contextvars.ContextVar(
    "_switchboard_users_held", default=frozenset()
)


class KeyedLockManager(ABC):
    """Serializes everything that touches one user's conversation.

    Turns, explicit clears and reaper evictions all run inside
    ``locked(user_id)``, so they never interleave for the same user while
    different users proceed concurrently.

    Implementations must be reentrant within one execution context: code
    that already holds a user's lock can call helpers that take it again.
    """

    @abstractmethod
    @asynccontextmanager
    async def locked(self, user_id: str) -> AsyncIterator[None]:
        """Hold the lock for *user_id* for the duration of the block."""
        yield  # pragma: no cover

    def discard(self, user_id: str) -> bool:
        """Release bookkeeping for a user whose conversation is gone.

        Returns ``True`` when something was dropped.  Managers that expire
        their own entries can keep this default.
        """
        return False


@dataclass
class _UserLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    # Callers inside locked() for this user, holding or waiting.
    users: int = 0

    @property
    def idle(self) -> bool:
        return self.users == 0 and not self.lock.locked()


class InMemoryLockManager(KeyedLockManager):
    """``asyncio.Lock`` per user, kept in recently-used order.

    At most ``max_locks`` idle entries are retained; beyond that the
    least recently used idle ones are dropped.  An entry somebody holds or
    waits on is never dropped, otherwise two waiters could end up on
    different locks for one user.

    Only valid within one process.  Deployments that spread one user's
    messages over several workers need a distributed manager.
    """

    def __init__(self, max_locks: int = 1024) -> None:
        if max_locks < 1:
            raise ValueError("max_locks must be positive")
        self._slots: OrderedDict[str, _UserLock] = OrderedDict()
        self._max_locks = max_locks

    @asynccontextmanager
    async def locked(self, user_id: str) -> AsyncIterator[None]:
        held = _held_keys.get()
        if user_id in held:
            yield
            return

        slot = self._checkout(user_id)
        try:
            async with slot.lock:
                token = _held_keys.set(held | {user_id})
                try:
                    yield
                finally:
                    _held_keys.reset(token)
        finally:
            slot.users -= 1

    def discard(self, user_id: str) -> bool:
        """Drop *user_id*'s lock unless somebody holds or awaits it."""
        slot = self._slots.get(user_id)
        if slot is None or not slot.idle:
            return False
        del self._slots[user_id]
        return True

    def is_locked(self, user_id: str) -> bool:
        slot = self._slots.get(user_id)
        return slot is not None and slot.lock.locked()

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._slots

    @property
    def size(self) -> int:
        """Number of users with a tracked lock."""
        return len(self._slots)

    def _checkout(self, user_id: str) -> _UserLock:
        slot = self._slots.get(user_id)
        if slot is None:
            slot = self._slots[user_id] = _UserLock()
        else:
            self._slots.move_to_end(user_id)
        slot.users += 1
        self._trim()
        return slot

    def _trim(self) -> None:
        excess = len(self._slots) - self._max_locks
        if excess <= 0:
            return
        stale = [user_id for user_id, slot in self._slots.items() if slot.idle][:excess]
        for user_id in stale:
            del self._slots[user_id]
