"""Tests for AgentRoster."""

from __future__ import annotations

import pytest

from switchboard.agents.roster import AgentRoster, default_roster
from switchboard.core.framework import RosterError
from switchboard.providers.ai.mock import MockAIProvider
from tests.conftest import ScriptedAgent


class TestAgentRoster:
    def test_default_roster(self) -> None:
        roster = default_roster(MockAIProvider())
        assert list(roster) == ["foodie", "ridenow", "askme"]
        assert roster.default_agent_id == "askme"
        assert roster.default_agent is roster["askme"]

    def test_is_read_only_mapping(self) -> None:
        roster = default_roster(MockAIProvider())
        assert len(roster) == 3
        assert "foodie" in roster
        assert "pizza" not in roster
        with pytest.raises(TypeError):
            roster["new"] = roster["foodie"]  # type: ignore[index]

    def test_duplicate_ids_rejected(self) -> None:
        with pytest.raises(RosterError, match="Duplicate"):
            AgentRoster([ScriptedAgent("a", fallback=True), ScriptedAgent("a")])

    def test_requires_a_fallback(self) -> None:
        with pytest.raises(RosterError, match="exactly one fallback"):
            AgentRoster([ScriptedAgent("a"), ScriptedAgent("b")])

    def test_rejects_two_fallbacks(self) -> None:
        with pytest.raises(RosterError):
            AgentRoster([ScriptedAgent("a", fallback=True), ScriptedAgent("b", fallback=True)])

    def test_descriptors(self) -> None:
        descriptors = default_roster(MockAIProvider()).descriptors()
        assert list(descriptors) == ["foodie", "ridenow", "askme"]
        assert descriptors["ridenow"].display_name == "RideNow AI"
        assert descriptors["askme"].is_fallback
        assert not descriptors["foodie"].is_fallback

    def test_forget_user_reaches_every_agent(self) -> None:
        a = ScriptedAgent("a", fallback=True)
        b = ScriptedAgent("b")
        AgentRoster([a, b]).forget_user("u1")
        assert a.forgotten == ["u1"]
        assert b.forgotten == ["u1"]

    def test_forget_user_survives_failing_agent(self) -> None:
        class Broken(ScriptedAgent):
            def forget(self, user_id: str) -> None:
                raise RuntimeError("boom")

        ok = ScriptedAgent("ok", fallback=True)
        AgentRoster([Broken("broken"), ok]).forget_user("u1")
        assert ok.forgotten == ["u1"]
