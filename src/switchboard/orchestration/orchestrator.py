"""Turn processing: route, invoke, hand off, persist.

One turn runs entirely under the user's lock:

1. load or create the context, append the user's message and persist it
   before anything can block, so a failed turn never loses the fact that
   the user spoke;
2. select the agent (pending handoff, sticky, or classification);
3. invoke ``process_message`` (or ``handle_handoff`` when the turn
   installs a handoff target) under a timeout;
4. record the reply and any handoff directive; an ``auto_handoff``
   directive is completed in the same turn;
5. persist and return the envelope.

Any failure in steps 2-4 is converted into the default agent's error
reply.  The context keeps the agent and replies recorded before the
failure, drops pending handoff flags and records the error reply, so the
conversation stays usable.  When an auto handoff target fails, the agent
that requested it stays current.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from datetime import timedelta
from typing import TYPE_CHECKING

from switchboard.core.circuit_breaker import CircuitBreaker
from switchboard.core.clock import Clock, SystemClock
from switchboard.core.locks import InMemoryLockManager, KeyedLockManager
from switchboard.models.profile import UserProfile
from switchboard.models.response import AgentResponse, HandoffDirective, ResponseEnvelope
from switchboard.orchestration.classifier import IntentClassifier
from switchboard.orchestration.config import OrchestratorConfig
from switchboard.orchestration.handoff import HandoffPolicy, handoff_request_message
from switchboard.orchestration.router import AgentRouter, RouteReason
from switchboard.orchestration.state import ConversationContext
from switchboard.providers.ai.base import AIProvider

if TYPE_CHECKING:
    from switchboard.agents.base import Agent
    from switchboard.agents.roster import AgentRoster
    from switchboard.store.base import ContextStore

logger = logging.getLogger("switchboard.orchestration")

_LAST_RESORT_MESSAGE = (
    "I'm sorry, something went wrong on my side. Could you try that again in a moment?"
)

_Turn = tuple[ResponseEnvelope, ConversationContext]


class Orchestrator:
    """Central routing state machine over an immutable agent roster."""

    def __init__(
        self,
        roster: AgentRoster,
        store: ContextStore,
        provider: AIProvider,
        *,
        lock_manager: KeyedLockManager | None = None,
        clock: Clock | None = None,
        config: OrchestratorConfig | None = None,
        classifier: IntentClassifier | None = None,
    ) -> None:
        """Initialise the orchestrator.

        Args:
            roster: Registered agents; its fallback agent is the default.
            store: Context store. The orchestrator is its only writer.
            provider: Completion service used for intent classification.
            lock_manager: Per-user locking. Defaults to ``InMemoryLockManager``.
            clock: Time source for history timestamps and idle checks.
            config: Timeouts, history window and sticky-routing bound.
            classifier: Overrides the classifier built from *provider*.
        """
        self._roster = roster
        self._store = store
        self._config = config or OrchestratorConfig()
        self._clock = clock or SystemClock()
        self._locks = lock_manager or InMemoryLockManager()
        self._classifier = classifier or IntentClassifier(
            provider,
            roster,
            history_window=self._config.history_window,
            timeout=self._config.classification_timeout,
            breaker=CircuitBreaker(
                failure_threshold=self._config.breaker_failure_threshold,
                recovery_timeout=self._config.breaker_recovery_timeout,
            ),
        )
        self._router = AgentRouter(
            roster, self._classifier, max_sticky_turns=self._config.max_sticky_turns
        )
        self._handoffs = HandoffPolicy(roster)

    @property
    def roster(self) -> AgentRoster:
        return self._roster

    @property
    def store(self) -> ContextStore:
        return self._store

    @property
    def lock_manager(self) -> KeyedLockManager:
        return self._locks

    @property
    def classifier(self) -> IntentClassifier:
        return self._classifier

    # -- Turns ---------------------------------------------------------------

    async def process_turn(
        self,
        user_id: str,
        message: str,
        profile: UserProfile | None = None,
        *,
        agent_preference: str | None = None,
    ) -> ResponseEnvelope:
        """Run one turn for *user_id* and return the unified envelope."""
        return await self._turn(user_id, message, profile, agent_preference=agent_preference)

    async def request_handoff(
        self,
        user_id: str,
        target_agent: str,
        reason: str = "",
        profile: UserProfile | None = None,
    ) -> ResponseEnvelope:
        """Run a synthesized "Hand me over to <target>" turn.

        The handoff is recorded as pending before routing, so the turn goes
        straight to the target's ``handle_handoff``.
        """
        directive = HandoffDirective(
            target_agent=target_agent,
            reason=reason or "user requested handoff",
            context={"requested_by": "user"},
        )
        return await self._turn(
            user_id, handoff_request_message(target_agent), profile, requested=directive
        )

    async def _turn(
        self,
        user_id: str,
        message: str,
        profile: UserProfile | None,
        *,
        agent_preference: str | None = None,
        requested: HandoffDirective | None = None,
    ) -> ResponseEnvelope:
        async with self._locks.locked(user_id):
            context = await self._store.get_or_create(user_id)
            context = context.with_user_turn(message, self._clock.now())
            if requested is not None:
                directive = self._handoffs.resolve(
                    requested, current_agent=context.current_agent, user_id=user_id
                )
                if directive is not None:
                    context = context.with_handoff_request(directive)
            context = await self._store.put(user_id, context)

            try:
                envelope, context = await self._run(message, context, profile, agent_preference)
            except Exception as exc:
                envelope, context = self._recover(message, context, exc)

            await self._store.put(user_id, context)
            return envelope

    async def _run(
        self,
        message: str,
        context: ConversationContext,
        profile: UserProfile | None,
        agent_preference: str | None,
    ) -> _Turn:
        decision = await self._router.select(
            message, context, profile, agent_preference=agent_preference
        )
        agent = self._roster[decision.agent_id]

        pending = HandoffPolicy.pending(context)
        if decision.reason is RouteReason.HANDOFF and pending is not None:
            return await self._complete_handoff(
                agent, pending, context, message, from_agent=context.current_agent
            )

        if context.current_agent != agent.agent_id:
            logger.info(
                "Switching agent %s -> %s",
                context.current_agent,
                agent.agent_id,
                extra={"user_id": context.user_id, "agent_id": agent.agent_id},
            )
        if context.handoff_requested:
            # Only reachable when the recorded target is no longer registered.
            context = context.without_handoff()
        context = context.with_agent(agent.agent_id, sticky=decision.reason is RouteReason.STICKY)
        response = await self._invoke(agent, agent.process_message(message, context, profile))
        context = context.with_agent_turn(agent.agent_id, response, self._clock.now())

        if response.handoff is None:
            return ResponseEnvelope.from_response(agent.agent_id, response), context

        directive = self._handoffs.resolve(
            response.handoff, current_agent=agent.agent_id, user_id=context.user_id
        )
        if directive is None:
            return ResponseEnvelope.from_response(agent.agent_id, response), context

        context = context.with_handoff_request(directive)
        logger.info(
            "Agent %s requested handoff to %s",
            agent.agent_id,
            directive.target_agent,
            extra={
                "user_id": context.user_id,
                "agent_id": agent.agent_id,
                "target_agent": directive.target_agent,
                "reason": directive.reason,
            },
        )
        if not directive.auto_handoff:
            return (
                ResponseEnvelope.from_response(agent.agent_id, response, handoff=directive),
                context,
            )
        target = self._roster[directive.target_agent]
        try:
            return await self._complete_handoff(
                target, directive, context, message, from_agent=agent.agent_id
            )
        except Exception as exc:
            # The first agent's reply is already in history and stays there.
            return self._recover(message, context, exc)

    async def _complete_handoff(
        self,
        target: Agent,
        directive: HandoffDirective,
        context: ConversationContext,
        message: str,
        *,
        from_agent: str | None,
    ) -> _Turn:
        handoff_context = HandoffPolicy.context_for(
            directive, from_agent=from_agent, user_message=message
        )
        response = await self._invoke(target, target.handle_handoff(handoff_context, context))
        if response.handoff is not None:
            # Chained handoffs would let two agents bounce a user forever.
            logger.debug(
                "Ignoring handoff directive from %s welcome",
                target.agent_id,
                extra={"user_id": context.user_id, "agent_id": target.agent_id},
            )
            response = response.model_copy(update={"handoff": None})
        context = context.with_handoff_completed(
            target.agent_id, response, self._clock.now(), from_agent=from_agent
        )
        logger.info(
            "Handoff %s -> %s completed",
            from_agent,
            target.agent_id,
            extra={
                "user_id": context.user_id,
                "agent_id": target.agent_id,
                "reason": directive.reason,
            },
        )
        return (
            ResponseEnvelope.from_response(target.agent_id, response, handoff=directive),
            context,
        )

    async def _invoke(self, agent: Agent, call: Awaitable[AgentResponse]) -> AgentResponse:
        from switchboard.core.framework import AgentProcessingError

        timeout = self._config.agent_timeout
        try:
            response = await asyncio.wait_for(call, timeout)
        except TimeoutError as exc:
            raise AgentProcessingError(
                f"Agent {agent.agent_id} timed out after {timeout}s", agent_id=agent.agent_id
            ) from exc
        except Exception as exc:
            raise AgentProcessingError(
                f"Agent {agent.agent_id} failed: {exc}", agent_id=agent.agent_id
            ) from exc
        if not isinstance(response, AgentResponse):
            raise AgentProcessingError(
                f"Agent {agent.agent_id} returned {type(response).__name__}",
                agent_id=agent.agent_id,
            )
        return self._stamp(agent.agent_id, response)

    def _stamp(self, agent_id: str, response: AgentResponse) -> AgentResponse:
        metadata = dict(response.metadata)
        metadata.setdefault("agent", agent_id)
        metadata.setdefault("timestamp", self._clock.now().isoformat())
        return response.model_copy(update={"metadata": metadata})

    def _recover(self, message: str, context: ConversationContext, exc: Exception) -> _Turn:
        """Turn a failed turn into the default agent's error reply."""
        default = self._roster.default_agent
        logger.exception(
            "Turn failed, answering with %s",
            default.agent_id,
            extra={"user_id": context.user_id, "agent_id": context.current_agent},
        )
        try:
            response = default.handle_error(message, exc)
        except Exception:
            logger.exception("Default agent error path failed", extra={"user_id": context.user_id})
            response = AgentResponse(message=_LAST_RESORT_MESSAGE)
        response = self._stamp(default.agent_id, response)
        response = response.model_copy(
            update={"handoff": None, "metadata": {**response.metadata, "error": True}}
        )
        context = context.without_handoff().with_agent_turn(
            default.agent_id, response, self._clock.now()
        )
        return ResponseEnvelope.from_response(default.agent_id, response), context

    # -- Context access ------------------------------------------------------

    async def get_context(self, user_id: str) -> ConversationContext | None:
        return await self._store.get(user_id)

    async def clear_context(self, user_id: str) -> bool:
        """Delete the user's context and every agent's private state for them."""
        async with self._locks.locked(user_id):
            existed = await self._store.delete(user_id)
            self._roster.forget_user(user_id)
        self._locks.discard(user_id)
        if existed:
            logger.info("Cleared context", extra={"user_id": user_id})
        return existed

    async def evict_if_idle(self, user_id: str, max_idle: timedelta) -> bool:
        """Evict one context if it is still idle once the user's lock is held.

        A turn that completed while the sweep waited for the lock makes the
        context fresh again, in which case it is kept.
        """
        async with self._locks.locked(user_id):
            context = await self._store.get(user_id)
            if context is None or context.idle_for(self._clock.now()) <= max_idle:
                return False
            await self._store.delete(user_id)
            self._roster.forget_user(user_id)
        self._locks.discard(user_id)
        logger.info(
            "Evicted idle context",
            extra={"user_id": user_id, "max_idle": str(max_idle)},
        )
        return True

    async def sweep_idle(self, max_idle: timedelta) -> int:
        """Evict every context idle for longer than *max_idle*."""
        evicted = 0
        for user_id in await self._store.idle_user_ids(max_idle):
            if await self.evict_if_idle(user_id, max_idle):
                evicted += 1
        return evicted
