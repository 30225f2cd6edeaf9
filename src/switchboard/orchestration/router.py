"""Agent selection policy for a single turn."""

from __future__ import annotations

import logging
from enum import StrEnum, unique
from typing import TYPE_CHECKING

from pydantic import BaseModel

from switchboard.models.profile import UserProfile
from switchboard.orchestration.classifier import Classification, IntentClassifier
from switchboard.orchestration.state import ConversationContext

if TYPE_CHECKING:
    from switchboard.agents.roster import AgentRoster

logger = logging.getLogger("switchboard.orchestration.router")


@unique
class RouteReason(StrEnum):
    HANDOFF = "handoff"
    STICKY = "sticky"
    CLASSIFIED = "classified"
    FALLBACK = "fallback"


class RoutingDecision(BaseModel):
    agent_id: str
    reason: RouteReason
    classification: Classification | None = None


class AgentRouter:
    """Decides which agent owns a turn.

    Priority order:

    1. A pending handoff routes straight to its recorded target.
    2. Sticky affinity: the current agent keeps the turn when its
       ``can_handle`` accepts the message, without asking the classifier.
       ``max_sticky_turns`` optionally bounds how many consecutive turns an
       agent may keep this way.
    3. One classification call; unregistered or failed answers resolve to
       the default agent.
    """

    def __init__(
        self,
        roster: AgentRoster,
        classifier: IntentClassifier,
        *,
        max_sticky_turns: int | None = None,
    ) -> None:
        self._roster = roster
        self._classifier = classifier
        self._max_sticky_turns = max_sticky_turns

    async def select(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None = None,
        *,
        agent_preference: str | None = None,
    ) -> RoutingDecision:
        extra = {"user_id": context.user_id, "agent_id": context.current_agent}

        if context.handoff_requested:
            target = context.handoff_target
            if target is not None and target in self._roster:
                logger.debug("Routing to pending handoff target %s", target, extra=extra)
                return RoutingDecision(agent_id=target, reason=RouteReason.HANDOFF)
            logger.warning("Pending handoff target %s is not registered", target, extra=extra)
        else:
            sticky = self._sticky_agent(message, context)
            if sticky is not None:
                logger.debug("Sticky routing to %s", sticky, extra=extra)
                return RoutingDecision(agent_id=sticky, reason=RouteReason.STICKY)

        classification = await self._classifier.classify(
            message, context, profile, agent_preference=agent_preference
        )
        reason = RouteReason.FALLBACK if classification.fallback else RouteReason.CLASSIFIED
        logger.debug(
            "Routing to %s (%s)", classification.agent_id, classification.outcome, extra=extra
        )
        return RoutingDecision(
            agent_id=classification.agent_id, reason=reason, classification=classification
        )

    def _sticky_agent(self, message: str, context: ConversationContext) -> str | None:
        current = context.current_agent
        if current is None or current not in self._roster:
            return None
        if self._max_sticky_turns is not None and context.sticky_turns >= self._max_sticky_turns:
            logger.info(
                "Agent %s reached %d sticky turns, reclassifying",
                current,
                context.sticky_turns,
                extra={"user_id": context.user_id, "agent_id": current},
            )
            return None
        try:
            keeps = self._roster[current].can_handle(message, context)
        except Exception:
            logger.warning(
                "can_handle raised for %s, reclassifying",
                current,
                exc_info=True,
                extra={"user_id": context.user_id, "agent_id": current},
            )
            return None
        return current if keeps else None
