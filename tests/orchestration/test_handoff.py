"""Tests for HandoffPolicy."""

from __future__ import annotations

import pytest

from switchboard.agents.roster import AgentRoster
from switchboard.models.response import HandoffDirective
from switchboard.orchestration.handoff import HandoffPolicy, handoff_request_message
from tests.conftest import make_context


@pytest.fixture
def policy(roster: AgentRoster) -> HandoffPolicy:
    return HandoffPolicy(roster)


class TestResolve:
    def test_registered_target_kept(self, policy: HandoffPolicy) -> None:
        directive = HandoffDirective(target_agent="askme", reason="general")
        assert policy.resolve(directive, current_agent="foodie") == directive

    def test_target_equal_to_current_dropped(self, policy: HandoffPolicy) -> None:
        directive = HandoffDirective(target_agent="foodie")
        assert policy.resolve(directive, current_agent="foodie") is None

    def test_unknown_target_replaced_by_default(self, policy: HandoffPolicy) -> None:
        directive = HandoffDirective(target_agent="weatherbot", reason="weather", auto_handoff=True)
        resolved = policy.resolve(directive, current_agent="foodie")
        assert resolved is not None
        assert resolved.target_agent == "askme"
        assert resolved.context["requested_agent"] == "weatherbot"
        assert resolved.reason == "weather"
        assert resolved.auto_handoff

    def test_unknown_target_dropped_when_default_is_current(self, policy: HandoffPolicy) -> None:
        directive = HandoffDirective(target_agent="weatherbot")
        assert policy.resolve(directive, current_agent="askme") is None

    def test_from_empty_conversation(self, policy: HandoffPolicy) -> None:
        directive = HandoffDirective(target_agent="ridenow")
        assert policy.resolve(directive, current_agent=None) == directive


class TestContext:
    def test_context_for(self) -> None:
        directive = HandoffDirective(
            target_agent="askme",
            reason="general",
            context={"from_agent": "foodie", "order_id": "o1"},
        )
        ctx = HandoffPolicy.context_for(directive, from_agent="foodie", user_message="help")
        assert ctx == {
            "from_agent": "foodie",
            "order_id": "o1",
            "reason": "general",
            "user_message": "help",
        }

    def test_pending_round_trip(self) -> None:
        directive = HandoffDirective(target_agent="foodie", reason="food", context={"k": "v"})
        ctx = make_context(current_agent="ridenow").with_handoff_request(directive)
        assert HandoffPolicy.pending(ctx) == directive

    def test_pending_none(self) -> None:
        assert HandoffPolicy.pending(make_context()) is None


def test_handoff_request_message() -> None:
    assert handoff_request_message("foodie") == "Hand me over to foodie"
