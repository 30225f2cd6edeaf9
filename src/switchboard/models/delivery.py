"""Inbound intake model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class InboundMessage(BaseModel):
    """A message handed over by the transport layer."""

    user_id: str
    message: str
    agent_preference: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
