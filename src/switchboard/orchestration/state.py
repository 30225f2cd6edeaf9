"""Conversation context models for agent orchestration.

One ``ConversationContext`` per active user.  Contexts are frozen: every
transition returns a new instance, and the orchestrator writes the final
instance of a turn back to the store as a whole-context replacement.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from enum import StrEnum, unique
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from switchboard.models.response import AgentResponse, HandoffDirective


@unique
class TurnOrigin(StrEnum):
    USER = "user"
    AGENT = "agent"
    HANDOFF = "handoff"


@unique
class ConversationPhase(StrEnum):
    """Where a conversation sits between turns.

    ``ROUTING`` only exists while a turn is selecting its agent, and
    ``EXPIRED`` is what the reaper leaves behind (no context at all);
    both are listed for completeness of the state machine.
    """

    NO_AGENT = "no_agent"
    ROUTING = "routing"
    ACTIVE = "active"
    HANDOFF_PENDING = "handoff_pending"
    EXPIRED = "expired"


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConversationTurn(BaseModel):
    """A single history entry."""

    model_config = ConfigDict(frozen=True)

    origin: TurnOrigin
    content: str
    agent_id: str | None = None
    from_agent: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ConversationContext(BaseModel):
    """Per-user conversation state tracked across turns."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    current_agent: str | None = None
    history: tuple[ConversationTurn, ...] = ()
    handoff_requested: bool = False
    handoff_target: str | None = None
    handoff_reason: str | None = None
    handoff_context: dict[str, Any] = Field(default_factory=dict)
    sticky_turns: int = 0
    created_at: datetime = Field(default_factory=_utcnow)
    last_activity: datetime = Field(default_factory=_utcnow)

    @property
    def phase(self) -> ConversationPhase:
        if self.handoff_requested:
            return ConversationPhase.HANDOFF_PENDING
        if self.current_agent is None:
            return ConversationPhase.NO_AGENT
        return ConversationPhase.ACTIVE

    def recent_history(self, limit: int | None = None) -> list[ConversationTurn]:
        """Return the last *limit* turns (all of them when ``None``)."""
        if limit is None:
            return list(self.history)
        if limit <= 0:
            return []
        return list(self.history[-limit:])

    def idle_for(self, now: datetime) -> timedelta:
        return now - self.last_activity

    # -- Transitions ---------------------------------------------------------
    # Each returns a new context; the original is never modified.

    def with_user_turn(self, message: str, now: datetime) -> ConversationContext:
        turn = ConversationTurn(origin=TurnOrigin.USER, content=message, timestamp=now)
        return self.model_copy(update={"history": (*self.history, turn), "last_activity": now})

    def with_agent(self, agent_id: str, *, sticky: bool = False) -> ConversationContext:
        """Assign the agent that owns this turn.

        ``sticky_turns`` counts consecutive turns kept without
        reclassification and resets whenever the agent was (re)selected.
        """
        return self.model_copy(
            update={
                "current_agent": agent_id,
                "sticky_turns": self.sticky_turns + 1 if sticky else 0,
            }
        )

    def with_agent_turn(
        self,
        agent_id: str,
        response: AgentResponse,
        now: datetime,
    ) -> ConversationContext:
        turn = ConversationTurn(
            origin=TurnOrigin.AGENT,
            agent_id=agent_id,
            content=response.message,
            timestamp=now,
            metadata=dict(response.metadata),
        )
        return self.model_copy(update={"history": (*self.history, turn), "last_activity": now})

    def with_handoff_request(self, directive: HandoffDirective) -> ConversationContext:
        return self.model_copy(
            update={
                "handoff_requested": True,
                "handoff_target": directive.target_agent,
                "handoff_reason": directive.reason,
                "handoff_context": dict(directive.context),
            }
        )

    def with_handoff_completed(
        self,
        target_agent: str,
        response: AgentResponse,
        now: datetime,
        *,
        from_agent: str | None = None,
    ) -> ConversationContext:
        """Install *target_agent* and record its welcome as a handoff turn."""
        turn = ConversationTurn(
            origin=TurnOrigin.HANDOFF,
            agent_id=target_agent,
            from_agent=from_agent,
            content=response.message,
            timestamp=now,
            metadata=dict(response.metadata),
        )
        return self.model_copy(
            update={
                "current_agent": target_agent,
                "sticky_turns": 0,
                "handoff_requested": False,
                "handoff_target": None,
                "handoff_reason": None,
                "handoff_context": {},
                "history": (*self.history, turn),
                "last_activity": now,
            }
        )

    def without_handoff(self) -> ConversationContext:
        return self.model_copy(
            update={
                "handoff_requested": False,
                "handoff_target": None,
                "handoff_reason": None,
                "handoff_context": {},
            }
        )
