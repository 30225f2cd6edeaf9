"""Intent classification through the completion service.

The classifier asks the service for exactly one registered agent id.  It
never raises: a timeout, a provider error, an open circuit breaker, or an
answer that is not a registered id all resolve to the roster's default
agent with ``fallback=True`` and a machine-readable reason.
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import StrEnum, unique
from typing import TYPE_CHECKING

from pydantic import BaseModel

from switchboard.core.circuit_breaker import CircuitBreaker
from switchboard.models.profile import UserProfile
from switchboard.orchestration.state import ConversationContext, TurnOrigin
from switchboard.providers.ai.base import AIContext, AIMessage, AIProvider, ProviderError

if TYPE_CHECKING:
    from switchboard.agents.roster import AgentRoster

logger = logging.getLogger("switchboard.orchestration.classifier")

_STRIP_CHARS = " \t\r\n\"'`.,;:!*"


@unique
class ClassificationOutcome(StrEnum):
    CLASSIFIED = "classified"
    UNKNOWN_AGENT = "unknown_agent"
    TIMEOUT = "timeout"
    PROVIDER_ERROR = "provider_error"
    BREAKER_OPEN = "breaker_open"


class Classification(BaseModel):
    """Result of one classification attempt."""

    agent_id: str
    outcome: ClassificationOutcome
    raw: str | None = None

    @property
    def fallback(self) -> bool:
        return self.outcome is not ClassificationOutcome.CLASSIFIED


class IntentClassifier:
    """Maps a message to one registered agent id."""

    def __init__(
        self,
        provider: AIProvider,
        roster: AgentRoster,
        *,
        history_window: int = 3,
        timeout: float = 10.0,
        breaker: CircuitBreaker | None = None,
    ) -> None:
        self._provider = provider
        self._roster = roster
        self._history_window = history_window
        self._timeout = timeout
        self._breaker = breaker or CircuitBreaker()

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    def system_prompt(self) -> str:
        lines = []
        for agent_id, descriptor in self._roster.descriptors().items():
            summary = ", ".join(descriptor.capabilities) or descriptor.display_name
            if descriptor.is_fallback:
                summary += "; anything not fitting the other agents"
            lines.append(f"- {agent_id}: {summary}")
        return (
            "You are an intent classifier for an app with multiple AI agents. "
            "Analyze the user's message and determine which agent should handle it.\n\n"
            "Available agents:\n"
            + "\n".join(lines)
            + "\n\nConsider the conversation context and user profile for better accuracy.\n"
            "Respond with only the agent id (lowercase)."
        )

    def build_context(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None = None,
        *,
        agent_preference: str | None = None,
    ) -> AIContext:
        # The newest history entry is the message itself; show what came before it.
        history = list(context.history)
        if history and history[-1].origin is TurnOrigin.USER and history[-1].content == message:
            history.pop()
        recent = history[-self._history_window :] if self._history_window else []
        if recent:
            context_info = "Recent conversation:\n" + "\n".join(
                f"{turn.origin}: {turn.content}" for turn in recent
            )
        else:
            context_info = "No previous context"

        hints = profile.routing_hints() if profile else {}
        user_info = (
            f"User preferences: {json.dumps(hints, sort_keys=True)}"
            if profile
            else "No user profile available"
        )
        parts = [f'Message: "{message}"', context_info, user_info]
        if agent_preference:
            parts.append(f"The user's app currently prefers: {agent_preference}")

        return AIContext(
            system_prompt=self.system_prompt(),
            messages=[AIMessage(role="user", content="\n\n".join(parts))],
            temperature=0.1,
            max_tokens=50,
        )

    def parse(self, raw: str) -> str | None:
        """Return the registered agent id in *raw*, or ``None``."""
        candidate = raw.strip(_STRIP_CHARS).lower()
        return candidate if candidate in self._roster else None

    async def classify(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None = None,
        *,
        agent_preference: str | None = None,
    ) -> Classification:
        default = self._roster.default_agent_id
        extra = {"user_id": context.user_id}

        if not self._breaker.allow_request():
            logger.warning("Classification skipped, circuit breaker open", extra=extra)
            return Classification(agent_id=default, outcome=ClassificationOutcome.BREAKER_OPEN)

        request = self.build_context(message, context, profile, agent_preference=agent_preference)
        try:
            response = await asyncio.wait_for(self._provider.generate(request), self._timeout)
        except TimeoutError:
            self._breaker.record_failure()
            logger.warning(
                "Classification timed out after %.1fs, using %s",
                self._timeout,
                default,
                extra=extra,
            )
            return Classification(agent_id=default, outcome=ClassificationOutcome.TIMEOUT)
        except ProviderError as exc:
            self._breaker.record_failure()
            logger.warning("Classification failed: %s", exc, extra=extra)
            return Classification(agent_id=default, outcome=ClassificationOutcome.PROVIDER_ERROR)
        except Exception:
            self._breaker.record_failure()
            logger.warning("Classification raised unexpectedly", exc_info=True, extra=extra)
            return Classification(agent_id=default, outcome=ClassificationOutcome.PROVIDER_ERROR)

        self._breaker.record_success()
        agent_id = self.parse(response.content)
        if agent_id is None:
            logger.warning(
                "Unknown agent %r from classifier, defaulting to %s",
                response.content,
                default,
                extra=extra,
            )
            return Classification(
                agent_id=default,
                outcome=ClassificationOutcome.UNKNOWN_AGENT,
                raw=response.content,
            )
        logger.debug("Classified message as %s", agent_id, extra={**extra, "agent_id": agent_id})
        return Classification(
            agent_id=agent_id, outcome=ClassificationOutcome.CLASSIFIED, raw=response.content
        )
