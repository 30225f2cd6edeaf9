"""Switchboard - the boundary a transport layer talks to."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any

from pydantic import BaseModel, Field

from switchboard.agents.roster import AgentRoster, default_roster
from switchboard.core.clock import Clock, SystemClock
from switchboard.core.locks import InMemoryLockManager, KeyedLockManager
from switchboard.models.agent import AgentDescriptor
from switchboard.models.delivery import InboundMessage
from switchboard.models.profile import UserProfile
from switchboard.models.response import ResponseEnvelope
from switchboard.orchestration.config import OrchestratorConfig, ReaperConfig
from switchboard.orchestration.orchestrator import Orchestrator
from switchboard.orchestration.reaper import SessionReaper
from switchboard.orchestration.state import ConversationContext
from switchboard.providers.ai.base import AIProvider
from switchboard.realtime.base import LiveEvent, LiveEventType, RealtimeBackend
from switchboard.realtime.memory import InMemoryRealtime
from switchboard.store.base import ContextStore
from switchboard.store.memory import InMemoryContextStore

__all__ = [
    "AgentProcessingError",
    "InvalidMessageError",
    "RosterError",
    "Switchboard",
    "SwitchboardConfig",
    "SwitchboardError",
    "UnknownAgentError",
]

logger = logging.getLogger("switchboard.framework")


class SwitchboardError(Exception):
    """Base exception for all switchboard errors."""


class InvalidMessageError(SwitchboardError):
    """Inbound message rejected before any context was touched.

    Attributes:
        code: Machine-readable reason, e.g. ``message_required``.
    """

    def __init__(self, message: str, *, code: str) -> None:
        super().__init__(message)
        self.code = code


class UnknownAgentError(SwitchboardError):
    """Agent id not present in the roster."""

    def __init__(self, agent_id: str) -> None:
        super().__init__(f"Unknown agent: {agent_id!r}")
        self.agent_id = agent_id


class RosterError(SwitchboardError):
    """Roster violates its invariants (duplicate ids, fallback count)."""


class AgentProcessingError(SwitchboardError):
    """An agent failed or timed out. Never escapes a turn."""

    def __init__(self, message: str, *, agent_id: str) -> None:
        super().__init__(message)
        self.agent_id = agent_id


class SwitchboardConfig(BaseModel):
    """Top-level settings; every field has a working default."""

    orchestrator: OrchestratorConfig = Field(default_factory=OrchestratorConfig)
    reaper: ReaperConfig = Field(default_factory=ReaperConfig)
    max_contexts: int | None = Field(default=None, ge=1)
    max_locks: int = Field(default=1024, ge=1)


class Switchboard:
    """Routes user messages to domain agents and tracks conversations.

    Usage::

        async with Switchboard(provider=OpenAIAIProvider(config)) as board:
            envelope = await board.handle_message("user-1", "find me a cab")

    Every turn returns a well-formed :class:`ResponseEnvelope`; internal
    failures degrade to a polite reply from the default agent.  The only
    errors raised to the caller are intake validation errors
    (:class:`InvalidMessageError`) and explicit references to agents that
    do not exist (:class:`UnknownAgentError`).
    """

    def __init__(
        self,
        provider: AIProvider,
        *,
        roster: AgentRoster | None = None,
        store: ContextStore | None = None,
        lock_manager: KeyedLockManager | None = None,
        realtime: RealtimeBackend | None = None,
        clock: Clock | None = None,
        config: SwitchboardConfig | None = None,
    ) -> None:
        """Initialise the switchboard.

        Args:
            provider: Completion service for classification, and for the
                bundled agents when *roster* is omitted.
            roster: Registered agents. Defaults to Foodie, RideNow and AskMe.
            store: Context store. Defaults to ``InMemoryContextStore``.
            lock_manager: Per-user locking. Defaults to ``InMemoryLockManager``.
                For multi-process deployments supply a distributed one.
            realtime: Live notification backend. Defaults to ``InMemoryRealtime``.
            clock: Time source, mostly for tests.
            config: Timeouts, bounds and the reaper schedule.
        """
        self._config = config or SwitchboardConfig()
        self._clock = clock or SystemClock()
        self._provider = provider
        self._roster = roster if roster is not None else default_roster(provider, clock=self._clock)
        if store is None:
            store = InMemoryContextStore(
                clock=self._clock,
                max_contexts=self._config.max_contexts,
                on_evict=self._roster.forget_user,
            )
        self._store = store
        self._realtime = realtime if realtime is not None else InMemoryRealtime()
        self._orchestrator = Orchestrator(
            self._roster,
            self._store,
            provider,
            lock_manager=lock_manager or InMemoryLockManager(max_locks=self._config.max_locks),
            clock=self._clock,
            config=self._config.orchestrator,
        )
        self._reaper = SessionReaper(self._orchestrator, self._config.reaper)

    # -- Properties ----------------------------------------------------------

    @property
    def roster(self) -> AgentRoster:
        return self._roster

    @property
    def store(self) -> ContextStore:
        return self._store

    @property
    def realtime(self) -> RealtimeBackend:
        return self._realtime

    @property
    def orchestrator(self) -> Orchestrator:
        return self._orchestrator

    @property
    def reaper(self) -> SessionReaper:
        return self._reaper

    # -- Lifecycle -----------------------------------------------------------

    async def start(self) -> None:
        self._reaper.start()

    async def close(self) -> None:
        await self._reaper.stop()
        await self._realtime.close()
        await self._store.close()
        await self._provider.close()

    async def __aenter__(self) -> Switchboard:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # -- Intake --------------------------------------------------------------

    async def handle_message(
        self,
        user_id: str,
        message: str,
        profile: UserProfile | None = None,
        *,
        agent_preference: str | None = None,
    ) -> ResponseEnvelope:
        """Process one inbound message and return the response envelope."""
        _validate(user_id, message)
        envelope = await self._orchestrator.process_turn(
            user_id, message, profile, agent_preference=agent_preference
        )
        await self._publish(user_id, LiveEventType.AGENT_RESPONSE, envelope.model_dump(mode="json"))
        return envelope

    async def handle_inbound(
        self, inbound: InboundMessage, profile: UserProfile | None = None
    ) -> ResponseEnvelope:
        return await self.handle_message(
            inbound.user_id,
            inbound.message,
            profile,
            agent_preference=inbound.agent_preference,
        )

    async def request_handoff(
        self,
        user_id: str,
        target_agent: str,
        reason: str = "",
        profile: UserProfile | None = None,
    ) -> ResponseEnvelope:
        """Explicitly hand the user's conversation to *target_agent*."""
        if not user_id or not user_id.strip():
            raise InvalidMessageError("user_id is required", code="user_required")
        if target_agent not in self._roster:
            raise UnknownAgentError(target_agent)
        envelope = await self._orchestrator.request_handoff(user_id, target_agent, reason, profile)
        if envelope.handoff is not None:
            await self._publish(
                user_id,
                LiveEventType.AGENT_HANDOFF,
                {"target_agent": target_agent, "agent": envelope.agent, "reason": reason},
            )
        await self._publish(user_id, LiveEventType.AGENT_RESPONSE, envelope.model_dump(mode="json"))
        return envelope

    # -- Context inspection --------------------------------------------------

    async def get_context(self, user_id: str) -> ConversationContext | None:
        """Current context snapshot, or ``None`` when the user has none."""
        return await self._orchestrator.get_context(user_id)

    async def clear_context(self, user_id: str) -> bool:
        cleared = await self._orchestrator.clear_context(user_id)
        await self._publish(user_id, LiveEventType.CONTEXT_CLEARED, {"cleared": cleared})
        return cleared

    async def sweep(self) -> int:
        """Evict idle contexts now, outside the reaper's schedule."""
        return await self._reaper.sweep()

    # -- Roster --------------------------------------------------------------

    def list_agents(self) -> dict[str, AgentDescriptor]:
        return self._roster.descriptors()

    @property
    def default_agent_id(self) -> str:
        return self._roster.default_agent_id

    def get_agent_status(self, agent_id: str) -> AgentDescriptor:
        if agent_id not in self._roster:
            raise UnknownAgentError(agent_id)
        return self._roster[agent_id].get_status()

    # -- Internal ------------------------------------------------------------

    async def _publish(self, user_id: str, event_type: LiveEventType, data: dict[str, Any]) -> None:
        event = LiveEvent(user_id=user_id, type=event_type, data=data, timestamp=self._clock.now())
        try:
            await self._realtime.publish_to_user(user_id, event)
        except Exception:
            logger.exception(
                "Failed to publish %s", event_type, extra={"user_id": user_id}
            )


def _validate(user_id: str, message: str) -> None:
    if not user_id or not user_id.strip():
        raise InvalidMessageError("user_id is required", code="user_required")
    if not isinstance(message, str) or not message.strip():
        raise InvalidMessageError("Message is required", code="message_required")
