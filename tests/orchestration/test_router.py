"""Tests for AgentRouter."""

from __future__ import annotations

from switchboard.models.response import HandoffDirective
from switchboard.orchestration.classifier import IntentClassifier
from switchboard.orchestration.router import AgentRouter, RouteReason
from switchboard.providers.ai.mock import MockAIProvider
from tests.conftest import ScriptedAgent, make_context, scripted_roster

# -- Helpers ------------------------------------------------------------------


def _router(
    *agents: ScriptedAgent,
    answer: str = "b",
    max_sticky_turns: int | None = None,
) -> tuple[AgentRouter, MockAIProvider]:
    roster = scripted_roster(*agents)
    provider = MockAIProvider([answer])
    classifier = IntentClassifier(provider, roster)
    return AgentRouter(roster, classifier, max_sticky_turns=max_sticky_turns), provider


def _agents(*, a_handles: bool = True) -> tuple[ScriptedAgent, ScriptedAgent, ScriptedAgent]:
    return (
        ScriptedAgent("a", handles=a_handles),
        ScriptedAgent("b"),
        ScriptedAgent("fallback", fallback=True),
    )


# -- Sticky routing -----------------------------------------------------------


class TestSticky:
    async def test_current_agent_keeps_turn_without_classification(self) -> None:
        a, b, fb = _agents()
        router, provider = _router(a, b, fb)
        decision = await router.select("yes", make_context(current_agent="a"))
        assert decision.agent_id == "a"
        assert decision.reason is RouteReason.STICKY
        assert provider.call_count == 0
        assert a.can_handle_calls == ["yes"]

    async def test_declining_agent_triggers_classification(self) -> None:
        a, b, fb = _agents(a_handles=False)
        router, provider = _router(a, b, fb, answer="b")
        decision = await router.select("book a cab", make_context(current_agent="a"))
        assert decision.agent_id == "b"
        assert decision.reason is RouteReason.CLASSIFIED
        assert provider.call_count == 1

    async def test_no_current_agent_classifies(self) -> None:
        router, provider = _router(*_agents())
        decision = await router.select("hi", make_context())
        assert decision.reason is RouteReason.CLASSIFIED
        assert provider.call_count == 1

    async def test_unregistered_current_agent_classifies(self) -> None:
        router, provider = _router(*_agents())
        await router.select("hi", make_context(current_agent="retired"))
        assert provider.call_count == 1

    async def test_raising_can_handle_reclassifies(self) -> None:
        class Grumpy(ScriptedAgent):
            def can_handle(self, message, context):  # type: ignore[no-untyped-def]
                raise RuntimeError("boom")

        router, provider = _router(
            Grumpy("a"), ScriptedAgent("b"), ScriptedAgent("fb", fallback=True)
        )
        decision = await router.select("hi", make_context(current_agent="a"))
        assert decision.agent_id == "b"
        assert provider.call_count == 1

    async def test_sticky_bound_forces_reclassification(self) -> None:
        router, provider = _router(*_agents(), answer="a", max_sticky_turns=2)
        ctx = make_context(current_agent="a").with_agent("a", sticky=True)
        assert (await router.select("x", ctx)).reason is RouteReason.STICKY

        ctx = ctx.with_agent("a", sticky=True)
        decision = await router.select("x", ctx)
        assert decision.reason is RouteReason.CLASSIFIED
        assert decision.agent_id == "a"
        assert provider.call_count == 1


# -- Pending handoff ----------------------------------------------------------


class TestPendingHandoff:
    async def test_routes_to_recorded_target_without_asking(self) -> None:
        a, b, fb = _agents()
        router, provider = _router(a, b, fb)
        ctx = make_context(current_agent="a").with_handoff_request(
            HandoffDirective(target_agent="b", reason="r")
        )
        decision = await router.select("anything", ctx)
        assert decision.agent_id == "b"
        assert decision.reason is RouteReason.HANDOFF
        assert provider.call_count == 0
        assert a.can_handle_calls == []

    async def test_unregistered_target_falls_to_classification(self) -> None:
        router, provider = _router(*_agents(), answer="b")
        ctx = make_context(current_agent="a").with_handoff_request(
            HandoffDirective(target_agent="ghost")
        )
        decision = await router.select("anything", ctx)
        assert decision.reason is RouteReason.CLASSIFIED
        assert provider.call_count == 1


# -- Classification fallback --------------------------------------------------


class TestFallback:
    async def test_unregistered_answer_routes_to_default(self) -> None:
        router, _ = _router(*_agents(), answer="nobody")
        decision = await router.select("hi", make_context())
        assert decision.agent_id == "fallback"
        assert decision.reason is RouteReason.FALLBACK
        assert decision.classification is not None

    async def test_agent_preference_is_only_a_hint(self) -> None:
        a, b, fb = _agents()
        router, provider = _router(a, b, fb)
        decision = await router.select(
            "yes", make_context(current_agent="a"), agent_preference="b"
        )
        assert decision.agent_id == "a"
        assert provider.call_count == 0
