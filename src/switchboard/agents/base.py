"""Agent contract shared by every domain handler."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel, Field, ValidationError

from switchboard.core.clock import Clock, SystemClock
from switchboard.models.agent import AgentDescriptor
from switchboard.models.profile import UserProfile
from switchboard.models.response import AgentResponse, HandoffDirective
from switchboard.orchestration.state import ConversationContext
from switchboard.providers.ai.base import AIContext, AIMessage, AIProvider, ProviderError

logger = logging.getLogger("switchboard.agents")

_ERROR_MESSAGE = (
    "I apologize, but I'm having trouble processing your request. "
    "Let me try to help you in a different way."
)


class IntentAnalysis(BaseModel):
    """Structured reading of a message, as returned by ``analyze_intent``."""

    intent: str = "unknown"
    entities: dict[str, Any] = Field(default_factory=dict)
    confidence: float = 0.0
    requires_action: bool = False


class Agent(ABC):
    """Base class for domain agents.

    Subclasses set the class attributes below and implement ``respond``.
    ``process_message`` wraps ``respond`` so recoverable failures come back
    as a degraded reply (``metadata["error"] = True``) instead of raising.

    Agents may keep private per-user task state (an order in progress, a
    ride being chosen) keyed by ``context.user_id``.  They never mutate the
    ``ConversationContext`` they are handed; it is a frozen snapshot.

    Exactly one agent in a roster sets ``fallback = True``.  The fallback
    agent must accept every message and serves as both the default
    classification target and the error-recovery path.
    """

    agent_id: ClassVar[str]
    display_name: ClassVar[str]
    capabilities: ClassVar[tuple[str, ...]] = ()
    fallback: ClassVar[bool] = False

    def __init__(self, provider: AIProvider, *, clock: Clock | None = None) -> None:
        self._provider = provider
        self._clock = clock or SystemClock()
        self._active = True
        self._last_activity = self._clock.now()

    # -- Contract ------------------------------------------------------------

    async def process_message(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None = None,
    ) -> AgentResponse:
        """Produce this agent's reply for one turn."""
        self._touch()
        try:
            return await self.respond(message, context, profile)
        except Exception as exc:
            return self.handle_error(message, exc)

    @abstractmethod
    async def respond(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None,
    ) -> AgentResponse:
        """Domain logic for one turn. May raise; ``process_message`` recovers."""
        ...

    def can_handle(self, message: str, context: ConversationContext) -> bool:
        """Whether this agent should keep the turn without reclassification.

        Must be cheap and free of side effects.
        """
        return True

    async def handle_handoff(
        self,
        handoff_context: dict[str, Any],
        context: ConversationContext,
    ) -> AgentResponse:
        """Welcome the user after this agent took over the conversation.

        Called exactly once, instead of ``process_message``, on the turn
        that installs this agent.  Private state for the user may be empty.
        """
        self._touch()
        capabilities = ", ".join(self.capabilities) or "your requests"
        return self.format_response(
            f"Hi! I'm {self.display_name}. I can help you with {capabilities}. "
            "How can I assist you today?",
            suggestions=self.generate_suggestions(context.user_id),
            metadata={"handoff_from": handoff_context.get("from_agent")},
        )

    def generate_suggestions(self, user_id: str) -> list[str]:
        """Reply hints for the user's current task stage."""
        return []

    def get_status(self) -> AgentDescriptor:
        return AgentDescriptor(
            agent_id=self.agent_id,
            display_name=self.display_name,
            capabilities=list(self.capabilities),
            is_active=self._active,
            is_fallback=self.fallback,
            last_activity=self._last_activity,
        )

    def forget(self, user_id: str) -> None:
        """Drop private task state for *user_id*. Stateless agents do nothing."""
        return None

    # -- Helpers -------------------------------------------------------------

    def handle_error(self, message: str, error: BaseException) -> AgentResponse:
        """Polite degraded reply for a failed turn, flagged ``metadata["error"]``."""
        self._log_failure(error)
        return self.format_response(_ERROR_MESSAGE, metadata={"error": True})

    def _log_failure(self, error: BaseException) -> None:
        logger.error(
            "Agent %s failed to process message",
            self.agent_id,
            exc_info=error,
            extra={"agent_id": self.agent_id},
        )

    def format_response(
        self,
        message: str,
        actions: list[dict[str, Any]] | None = None,
        suggestions: list[str] | None = None,
        metadata: dict[str, Any] | None = None,
        *,
        handoff: HandoffDirective | None = None,
    ) -> AgentResponse:
        """Build a response stamped with this agent's id and the current time."""
        stamped: dict[str, Any] = {
            "agent": self.agent_id,
            "timestamp": self._clock.now().isoformat(),
        }
        stamped.update(metadata or {})
        return AgentResponse(
            message=message,
            actions=actions or [],
            suggestions=suggestions or [],
            handoff=handoff,
            metadata=stamped,
        )

    def create_handoff(
        self,
        target_agent: str,
        reason: str,
        context: dict[str, Any] | None = None,
        *,
        auto_handoff: bool = False,
    ) -> HandoffDirective:
        return HandoffDirective(
            target_agent=target_agent,
            reason=reason,
            context={"from_agent": self.agent_id, **(context or {})},
            auto_handoff=auto_handoff,
        )

    async def analyze_intent(self, message: str) -> IntentAnalysis:
        """Ask the completion service for a structured reading of *message*.

        Degrades to ``intent="unknown"`` on any failure or malformed output.
        """
        prompt = (
            f"You are {self.display_name}, an assistant specialized in "
            f"{', '.join(self.capabilities)}.\n"
            "Analyze the user's message and extract key information relevant "
            "to your domain.\n\n"
            "Return only a JSON object with:\n"
            "- intent: the main intent/action the user wants (snake_case)\n"
            "- entities: key pieces of information extracted\n"
            "- confidence: confidence level (0-1)\n"
            "- requires_action: whether this requires external API calls"
        )
        context = AIContext(
            system_prompt=prompt,
            messages=[AIMessage(role="user", content=message)],
            temperature=0.1,
            max_tokens=200,
        )
        try:
            response = await self._provider.generate(context)
            return IntentAnalysis.model_validate(json.loads(response.content))
        except (ProviderError, ValueError, ValidationError) as exc:
            logger.warning(
                "Intent analysis failed for %s: %s",
                self.agent_id,
                exc,
                extra={"agent_id": self.agent_id},
            )
            return IntentAnalysis()

    async def generate_response(self, prompt: str, message: str, max_tokens: int = 150) -> str:
        """Free-text generation. Raises ``ProviderError`` on failure."""
        response = await self._provider.generate(
            AIContext(
                system_prompt=prompt,
                messages=[AIMessage(role="user", content=message)],
                temperature=0.7,
                max_tokens=max_tokens,
            )
        )
        return response.content.strip()

    def _touch(self) -> None:
        self._last_activity = self._clock.now()
