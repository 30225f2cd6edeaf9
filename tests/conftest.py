"""Shared test fixtures and helpers."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from datetime import timedelta
from typing import Any

import pytest

from switchboard.agents.base import Agent
from switchboard.agents.roster import AgentRoster, default_roster
from switchboard.core.clock import ManualClock
from switchboard.models.profile import Address, Preferences, RidePreferences, UserProfile
from switchboard.models.response import AgentResponse, HandoffDirective
from switchboard.orchestration.config import OrchestratorConfig
from switchboard.orchestration.orchestrator import Orchestrator
from switchboard.orchestration.state import ConversationContext
from switchboard.providers.ai.mock import MockAIProvider
from switchboard.store.memory import InMemoryContextStore


@pytest.fixture
def advance() -> Callable[[int], Coroutine[Any, Any, None]]:
    """Yield control to let pending tasks run without real delay::

    await advance()       # 5 yields (default)
    await advance(10)     # 10 yields for heavier workloads
    """

    async def _advance(n: int = 5) -> None:
        for _ in range(n):
            await asyncio.sleep(0)

    return _advance


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def agent_ai() -> MockAIProvider:
    """Completion service used by the agents for free-text generation."""
    return MockAIProvider(["Happy to help with that!"])


@pytest.fixture
def classifier_ai() -> MockAIProvider:
    """Completion service used by the orchestrator for classification."""
    return MockAIProvider(["askme"])


@pytest.fixture
def roster(agent_ai: MockAIProvider, clock: ManualClock) -> AgentRoster:
    return default_roster(agent_ai, clock=clock)


@pytest.fixture
def store(clock: ManualClock) -> InMemoryContextStore:
    return InMemoryContextStore(clock=clock)


@pytest.fixture
def orchestrator(
    roster: AgentRoster,
    store: InMemoryContextStore,
    classifier_ai: MockAIProvider,
    clock: ManualClock,
) -> Orchestrator:
    return Orchestrator(roster, store, classifier_ai, clock=clock)


def make_profile(user_id: str = "u1", **kwargs: Any) -> UserProfile:
    """Profile with a default home address in Bangalore."""
    ride_type = kwargs.pop("preferred_ride_type", None)
    kwargs.setdefault(
        "addresses",
        [Address(label="Home", street="12 MG Road", city="Bangalore", is_default=True)],
    )
    kwargs.setdefault(
        "preferences", Preferences(ride=RidePreferences(preferred_ride_type=ride_type))
    )
    return UserProfile(user_id=user_id, name=kwargs.pop("name", "Asha"), **kwargs)


def make_context(
    user_id: str = "u1",
    current_agent: str | None = None,
    clock: ManualClock | None = None,
    **kwargs: Any,
) -> ConversationContext:
    now = (clock or ManualClock()).now()
    return ConversationContext(
        user_id=user_id,
        current_agent=current_agent,
        created_at=now,
        last_activity=now,
        **kwargs,
    )


Reply = AgentResponse | Exception | Callable[[str], AgentResponse]


class ScriptedAgent(Agent):
    """Agent double whose replies, routing answers and failures are scripted.

    ``replies`` cycle like ``MockAIProvider`` responses.  ``raises`` makes
    ``process_message`` itself raise (bypassing the base class recovery),
    and ``delay`` makes it sleep first.
    """

    capabilities = ("testing",)

    def __init__(
        self,
        agent_id: str,
        *,
        fallback: bool = False,
        handles: bool = True,
        replies: list[Reply] | None = None,
        raises: Exception | None = None,
        delay: float = 0.0,
        welcome_handoff: HandoffDirective | None = None,
        clock: ManualClock | None = None,
    ) -> None:
        super().__init__(MockAIProvider(), clock=clock)
        self.agent_id = agent_id  # type: ignore[misc]
        self.display_name = agent_id.title()  # type: ignore[misc]
        self.fallback = fallback  # type: ignore[misc]
        self.handles = handles
        self.replies: list[Reply] = replies or []
        self.raises = raises
        self.delay = delay
        self.welcome_handoff = welcome_handoff
        self.received: list[str] = []
        self.handoffs: list[dict[str, Any]] = []
        self.can_handle_calls: list[str] = []
        self.forgotten: list[str] = []
        self._index = 0

    def can_handle(self, message: str, context: ConversationContext) -> bool:
        self.can_handle_calls.append(message)
        return self.handles

    async def process_message(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None = None,
    ) -> AgentResponse:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.raises is not None:
            self.received.append(message)
            raise self.raises
        return await super().process_message(message, context, profile)

    async def respond(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None,
    ) -> AgentResponse:
        self.received.append(message)
        if not self.replies:
            return self.format_response(f"{self.agent_id}: {message}")
        item = self.replies[self._index % len(self.replies)]
        self._index += 1
        if isinstance(item, Exception):
            raise item
        if callable(item):
            return item(message)
        return item

    async def handle_handoff(
        self,
        handoff_context: dict[str, Any],
        context: ConversationContext,
    ) -> AgentResponse:
        self.handoffs.append(handoff_context)
        if self.raises is not None:
            raise self.raises
        return self.format_response(
            f"{self.agent_id} here, taking over",
            handoff=self.welcome_handoff,
        )

    def forget(self, user_id: str) -> None:
        self.forgotten.append(user_id)


def scripted_roster(*agents: ScriptedAgent) -> AgentRoster:
    return AgentRoster(agents)


def scripted_orchestrator(
    *agents: ScriptedAgent,
    classifier_ai: MockAIProvider | None = None,
    clock: ManualClock | None = None,
    **config: Any,
) -> Orchestrator:
    clock = clock or ManualClock()
    return Orchestrator(
        scripted_roster(*agents),
        InMemoryContextStore(clock=clock),
        classifier_ai or MockAIProvider(["unknown"]),
        clock=clock,
        config=OrchestratorConfig(**config),
    )


HOUR = timedelta(hours=1)
DAY = timedelta(days=1)
