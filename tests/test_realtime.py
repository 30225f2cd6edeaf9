"""Tests for the in-memory live notification backend."""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from datetime import UTC, datetime
from typing import Any

from switchboard.realtime.base import LiveEvent, LiveEventType, user_channel
from switchboard.realtime.memory import InMemoryRealtime

Advance = Callable[..., Coroutine[Any, Any, None]]


def _event(user_id: str = "u1", **data: Any) -> LiveEvent:
    return LiveEvent(user_id=user_id, type=LiveEventType.AGENT_RESPONSE, data=data)


class TestLiveEvent:
    def test_to_dict_from_dict(self) -> None:
        event = LiveEvent(
            user_id="u1",
            type=LiveEventType.AGENT_HANDOFF,
            data={"target_agent": "askme"},
            timestamp=datetime(2024, 1, 1, tzinfo=UTC),
        )
        payload = event.to_dict()
        assert payload["type"] == "agent_handoff"
        assert payload["timestamp"] == "2024-01-01T00:00:00+00:00"
        assert LiveEvent.from_dict(payload) == event

    def test_user_channel(self) -> None:
        assert user_channel("u1") == "user:u1"


class TestInMemoryRealtime:
    async def test_delivers_to_user_subscribers(self, advance: Advance) -> None:
        backend = InMemoryRealtime()
        received: list[LiveEvent] = []

        async def on_event(event: LiveEvent) -> None:
            received.append(event)

        await backend.subscribe_to_user("u1", on_event)
        await backend.publish_to_user("u1", _event(n=1))
        await backend.publish_to_user("u2", _event("u2", n=2))
        await advance()

        assert [e.data["n"] for e in received] == [1]
        await backend.close()

    async def test_preserves_order(self, advance: Advance) -> None:
        backend = InMemoryRealtime()
        received: list[int] = []

        async def on_event(event: LiveEvent) -> None:
            received.append(event.data["n"])

        await backend.subscribe_to_user("u1", on_event)
        for n in range(5):
            await backend.publish_to_user("u1", _event(n=n))
        await advance()

        assert received == [0, 1, 2, 3, 4]
        await backend.close()

    async def test_failing_callback_does_not_stop_delivery(self, advance: Advance) -> None:
        backend = InMemoryRealtime()
        received: list[int] = []

        async def flaky(event: LiveEvent) -> None:
            if event.data["n"] == 0:
                raise RuntimeError("boom")
            received.append(event.data["n"])

        await backend.subscribe_to_user("u1", flaky)
        await backend.publish_to_user("u1", _event(n=0))
        await backend.publish_to_user("u1", _event(n=1))
        await advance()

        assert received == [1]
        await backend.close()

    async def test_full_buffer_drops_oldest(self, advance: Advance) -> None:
        backend = InMemoryRealtime(max_queue_size=2)
        received: list[int] = []

        async def on_event(event: LiveEvent) -> None:
            received.append(event.data["n"])

        await backend.subscribe_to_user("u1", on_event)
        # No yield between publishes, so the drain task has not run yet.
        for n in range(4):
            await backend.publish_to_user("u1", _event(n=n))
        await advance()

        assert received == [2, 3]
        await backend.close()

    async def test_unsubscribe(self, advance: Advance) -> None:
        backend = InMemoryRealtime()
        received: list[LiveEvent] = []

        async def on_event(event: LiveEvent) -> None:
            received.append(event)

        sub_id = await backend.subscribe_to_user("u1", on_event)
        assert backend.subscription_count == 1
        assert await backend.unsubscribe(sub_id) is True
        assert await backend.unsubscribe(sub_id) is False
        await backend.publish_to_user("u1", _event())
        await advance()

        assert received == []
        assert backend.subscription_count == 0

    async def test_publish_after_close_is_noop(self) -> None:
        backend = InMemoryRealtime()
        await backend.close()
        await backend.publish_to_user("u1", _event())
