"""Immutable agent roster built once at startup."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType

from switchboard.agents.askme import AskMeAgent
from switchboard.agents.base import Agent
from switchboard.agents.foodie import FoodieAgent
from switchboard.agents.ridenow import RideNowAgent
from switchboard.core.clock import Clock
from switchboard.models.agent import AgentDescriptor
from switchboard.providers.ai.base import AIProvider

logger = logging.getLogger("switchboard.agents")


class AgentRoster(Mapping[str, Agent]):
    """Read-only mapping of agent id to agent.

    Built once and injected into the orchestrator.  Construction enforces
    unique ids and exactly one fallback agent, which becomes the default
    agent for classification fallback and error recovery.
    """

    def __init__(self, agents: Iterable[Agent]) -> None:
        from switchboard.core.framework import RosterError

        by_id: dict[str, Agent] = {}
        for agent in agents:
            if agent.agent_id in by_id:
                raise RosterError(f"Duplicate agent id: {agent.agent_id!r}")
            by_id[agent.agent_id] = agent
        fallbacks = [a.agent_id for a in by_id.values() if a.fallback]
        if len(fallbacks) != 1:
            raise RosterError(
                f"Roster needs exactly one fallback agent, found {len(fallbacks)}: {fallbacks}"
            )
        self._agents = MappingProxyType(by_id)
        self._default = fallbacks[0]

    def __getitem__(self, agent_id: str) -> Agent:
        return self._agents[agent_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._agents)

    def __len__(self) -> int:
        return len(self._agents)

    @property
    def default_agent_id(self) -> str:
        return self._default

    @property
    def default_agent(self) -> Agent:
        return self._agents[self._default]

    def descriptors(self) -> dict[str, AgentDescriptor]:
        """Snapshot of every agent's status, in registration order."""
        return {agent_id: agent.get_status() for agent_id, agent in self._agents.items()}

    def forget_user(self, user_id: str) -> None:
        """Drop every agent's private task state for *user_id*."""
        for agent in self._agents.values():
            try:
                agent.forget(user_id)
            except Exception:
                logger.exception(
                    "Agent %s failed to forget user state",
                    agent.agent_id,
                    extra={"agent_id": agent.agent_id, "user_id": user_id},
                )


def default_roster(provider: AIProvider, *, clock: Clock | None = None) -> AgentRoster:
    """Roster with the bundled Foodie, RideNow and AskMe agents."""
    return AgentRoster(
        [
            FoodieAgent(provider, clock=clock),
            RideNowAgent(provider, clock=clock),
            AskMeAgent(provider, clock=clock),
        ]
    )
