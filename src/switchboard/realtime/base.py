"""Abstract base class and event types for the live notification channel."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any
from uuid import uuid4


class LiveEventType(StrEnum):
    """Kinds of events pushed to a user's live channel."""

    AGENT_RESPONSE = "agent_response"
    AGENT_HANDOFF = "agent_handoff"
    CONTEXT_CLEARED = "context_cleared"


@dataclass
class LiveEvent:
    """A fire-and-forget notification for one user."""

    user_id: str
    type: LiveEventType
    data: dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "type": self.type.value,
            "data": self.data,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LiveEvent:
        return cls(
            id=data["id"],
            user_id=data["user_id"],
            type=LiveEventType(data["type"]),
            data=data.get("data", {}),
            timestamp=datetime.fromisoformat(data["timestamp"]),
        )


LiveCallback = Callable[[LiveEvent], Coroutine[Any, Any, None]]


def user_channel(user_id: str) -> str:
    return f"user:{user_id}"


class RealtimeBackend(ABC):
    """Abstract pub/sub backend for live notifications.

    The orchestration boundary publishes every returned envelope here in
    addition to returning it.  Delivery is best effort: the caller logs
    publishing failures and carries on.
    """

    @abstractmethod
    async def publish(self, channel: str, event: LiveEvent) -> None:
        """Publish an event to a channel."""
        ...

    @abstractmethod
    async def subscribe(self, channel: str, callback: LiveCallback) -> str:
        """Subscribe to a channel.

        Returns:
            A subscription ID that can be used to unsubscribe.
        """
        ...

    @abstractmethod
    async def unsubscribe(self, subscription_id: str) -> bool:
        """Remove a subscription. Returns ``True`` if it existed."""
        ...

    async def publish_to_user(self, user_id: str, event: LiveEvent) -> None:
        await self.publish(user_channel(user_id), event)

    async def subscribe_to_user(self, user_id: str, callback: LiveCallback) -> str:
        return await self.subscribe(user_channel(user_id), callback)

    async def close(self) -> None:
        """Release backend resources. The default does nothing."""
        return None
