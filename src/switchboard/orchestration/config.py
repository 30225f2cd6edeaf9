"""Configuration for the orchestrator and the session reaper."""

from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, Field


class OrchestratorConfig(BaseModel):
    """Turn processing knobs.

    Attributes:
        history_window: Number of recent history turns sent to the classifier.
        classification_timeout: Seconds to wait for a classification answer.
        agent_timeout: Seconds to wait for an agent's reply before degrading.
        max_sticky_turns: Bound on consecutive turns kept by the current
            agent without reclassification. ``None`` keeps an agent for as
            long as its ``can_handle`` says yes.
        breaker_failure_threshold: Consecutive classification failures that
            open the circuit breaker.
        breaker_recovery_timeout: Seconds before an open breaker lets one
            probe request through.
    """

    history_window: int = Field(default=3, ge=0)
    classification_timeout: float = Field(default=10.0, gt=0)
    agent_timeout: float = Field(default=30.0, gt=0)
    max_sticky_turns: int | None = Field(default=None, ge=1)
    breaker_failure_threshold: int = Field(default=5, ge=1)
    breaker_recovery_timeout: float = Field(default=60.0, gt=0)


class ReaperConfig(BaseModel):
    """Idle-context eviction schedule, in seconds."""

    idle_timeout: float = Field(default=86400.0, ge=0)
    interval: float = Field(default=86400.0, gt=0)
    enabled: bool = True

    @property
    def max_idle(self) -> timedelta:
        return timedelta(seconds=self.idle_timeout)
