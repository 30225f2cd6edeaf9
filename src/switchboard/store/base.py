"""Abstract base class for conversation context storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import timedelta

from switchboard.orchestration.state import ConversationContext


class ContextStore(ABC):
    """Ephemeral per-user context storage.

    Keyed by user id.  Writes are whole-context replacements; the
    orchestrator is the only writer and serializes writes per key through
    its lock manager.  Everyone else must treat returned contexts as
    snapshots (they are frozen models).

    The library ships with ``InMemoryContextStore``.  An externalized
    backend must keep per-key atomicity for ``put`` and ``delete``.
    """

    @abstractmethod
    async def get(self, user_id: str) -> ConversationContext | None:
        """Get the context for *user_id*, or ``None`` if there is none."""
        ...

    @abstractmethod
    async def get_or_create(self, user_id: str) -> ConversationContext:
        """Get the context for *user_id*, creating an empty one if needed."""
        ...

    @abstractmethod
    async def put(self, user_id: str, context: ConversationContext) -> ConversationContext:
        """Replace the stored context for *user_id*."""
        ...

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        """Delete a context. Returns ``True`` if it existed."""
        ...

    @abstractmethod
    async def sweep_older_than(self, max_idle: timedelta) -> int:
        """Evict every context idle for longer than *max_idle*.

        Returns the number of contexts evicted.
        """
        ...

    @abstractmethod
    async def idle_user_ids(self, max_idle: timedelta) -> list[str]:
        """Return the ids of contexts idle for longer than *max_idle*."""
        ...

    @abstractmethod
    async def list_user_ids(self) -> list[str]:
        ...

    async def count(self) -> int:
        return len(await self.list_user_ids())

    async def close(self) -> None:
        """Release backend resources. The default does nothing."""
        return None
