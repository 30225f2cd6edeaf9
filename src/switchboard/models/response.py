"""Agent responses, handoff directives and the unified response envelope."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HandoffDirective(BaseModel):
    """Request from an agent to transfer the conversation to another agent.

    ``context`` is carried over to the receiving agent's ``handle_handoff``;
    it always includes ``from_agent`` when built via ``Agent.create_handoff``.
    """

    target_agent: str
    reason: str = ""
    context: dict[str, Any] = Field(default_factory=dict)
    auto_handoff: bool = False


class AgentResponse(BaseModel):
    """What an agent produces for a single turn.

    ``actions`` are structured UI directives (``{"type": ..., ...}``) and
    ``suggestions`` are short reply hints, both in display order.
    ``metadata`` always carries the producing agent id under ``agent`` and
    an ISO timestamp under ``timestamp``; the orchestrator stamps them if
    an agent forgets.
    """

    message: str
    actions: list[dict[str, Any]] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    handoff: HandoffDirective | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return bool(self.metadata.get("error"))


class ResponseEnvelope(BaseModel):
    """Unified per-turn result returned to the transport layer."""

    agent: str
    message: str
    actions: list[dict[str, Any]] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)
    handoff: HandoffDirective | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    error: bool = False

    @classmethod
    def from_response(
        cls,
        agent_id: str,
        response: AgentResponse,
        *,
        handoff: HandoffDirective | None = None,
    ) -> ResponseEnvelope:
        """Wrap *response* as produced by *agent_id*.

        ``handoff`` is the directive as validated against the roster, which
        may differ from the raw ``response.handoff`` (or be dropped).
        """
        return cls(
            agent=agent_id,
            message=response.message,
            actions=list(response.actions),
            suggestions=list(response.suggestions),
            handoff=handoff,
            metadata=dict(response.metadata),
            error=response.is_error,
        )
