"""Handoff directive validation.

Agents name handoff targets by id.  Before a directive is recorded it is
checked against the roster: a target that equals the current agent is
dropped, and an unknown target is treated like a failed classification
and replaced by the default agent.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from switchboard.models.response import HandoffDirective
from switchboard.orchestration.state import ConversationContext

if TYPE_CHECKING:
    from switchboard.agents.roster import AgentRoster

logger = logging.getLogger("switchboard.orchestration.handoff")

HANDOFF_REQUEST_TEMPLATE = "Hand me over to {target}"


def handoff_request_message(target_agent: str) -> str:
    """The inbound turn synthesized for an explicit handoff request."""
    return HANDOFF_REQUEST_TEMPLATE.format(target=target_agent)


class HandoffPolicy:
    """Normalizes handoff directives against an agent roster."""

    def __init__(self, roster: AgentRoster) -> None:
        self._roster = roster

    def resolve(
        self,
        directive: HandoffDirective,
        *,
        current_agent: str | None,
        user_id: str | None = None,
    ) -> HandoffDirective | None:
        """Return the directive to record, or ``None`` to drop it."""
        target = directive.target_agent
        if target not in self._roster:
            default = self._roster.default_agent_id
            logger.warning(
                "Handoff target %s is not registered, using %s",
                target,
                default,
                extra={"user_id": user_id, "target_agent": target, "agent_id": current_agent},
            )
            if default == current_agent:
                return None
            directive = directive.model_copy(
                update={
                    "target_agent": default,
                    "context": {**directive.context, "requested_agent": target},
                }
            )
        elif target == current_agent:
            logger.debug(
                "Dropping handoff to the current agent %s",
                target,
                extra={"user_id": user_id, "agent_id": current_agent},
            )
            return None
        return directive

    @staticmethod
    def context_for(
        directive: HandoffDirective,
        *,
        from_agent: str | None,
        user_message: str,
    ) -> dict[str, Any]:
        """Context handed to the target agent's ``handle_handoff``."""
        handoff_context: dict[str, Any] = {"from_agent": from_agent}
        handoff_context.update(directive.context)
        handoff_context.setdefault("reason", directive.reason)
        handoff_context["user_message"] = user_message
        return handoff_context

    @staticmethod
    def pending(context: ConversationContext) -> HandoffDirective | None:
        """Rebuild the directive recorded on *context*, if any."""
        if not context.handoff_requested or context.handoff_target is None:
            return None
        return HandoffDirective(
            target_agent=context.handoff_target,
            reason=context.handoff_reason or "",
            context=dict(context.handoff_context),
        )
