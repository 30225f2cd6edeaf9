"""Agent self-description model."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


class AgentDescriptor(BaseModel):
    """Snapshot of a registered agent.

    Created when the agent is constructed and refreshed on every processed
    message.  Capability tags are for self-description (roster queries,
    classification prompts), never for routing decisions.
    """

    agent_id: str
    display_name: str
    capabilities: list[str] = Field(default_factory=list)
    is_active: bool = True
    is_fallback: bool = False
    last_activity: datetime = Field(default_factory=lambda: datetime.now(UTC))
