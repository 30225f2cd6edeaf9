"""Tests for SessionReaper."""

from __future__ import annotations

import asyncio
import logging

import pytest

from switchboard.core.clock import ManualClock
from switchboard.orchestration.config import ReaperConfig
from switchboard.orchestration.orchestrator import Orchestrator
from switchboard.orchestration.reaper import SessionReaper
from switchboard.providers.ai.mock import MockAIProvider
from tests.conftest import ScriptedAgent, scripted_orchestrator


def _setup(
    clock: ManualClock, **config: object
) -> tuple[SessionReaper, Orchestrator, ScriptedAgent]:
    agent = ScriptedAgent("a")
    orch = scripted_orchestrator(
        agent, ScriptedAgent("fb", fallback=True), classifier_ai=MockAIProvider(["a"]), clock=clock
    )
    return SessionReaper(orch, ReaperConfig(**config)), orch, agent  # type: ignore[arg-type]


class TestSweep:
    async def test_evicts_only_idle_contexts(self, clock: ManualClock) -> None:
        reaper, orch, agent = _setup(clock, idle_timeout=3600)
        await orch.process_turn("old", "hi")
        clock.advance(hours=2)
        await orch.process_turn("new", "hi")

        assert await reaper.sweep() == 1
        assert await orch.get_context("old") is None
        assert await orch.get_context("new") is not None
        assert agent.forgotten == ["old"]

    async def test_nothing_to_evict(self, clock: ManualClock) -> None:
        reaper, orch, _ = _setup(clock)
        await orch.process_turn("u1", "hi")
        clock.advance(hours=23)
        assert await reaper.sweep() == 0


class TestLifecycle:
    async def test_start_and_stop(self, clock: ManualClock) -> None:
        reaper, _, _ = _setup(clock)
        assert not reaper.running
        reaper.start()
        assert reaper.running
        reaper.start()
        assert reaper.running

        await reaper.stop()
        assert not reaper.running
        await reaper.stop()

    async def test_disabled_reaper_never_starts(self, clock: ManualClock) -> None:
        reaper, _, _ = _setup(clock, enabled=False)
        reaper.start()
        assert not reaper.running

    async def test_runs_periodically(self, clock: ManualClock) -> None:
        reaper, orch, _ = _setup(clock, idle_timeout=60, interval=0.01)
        await orch.process_turn("u1", "hi")
        clock.advance(minutes=5)

        reaper.start()
        try:
            for _ in range(50):
                if await orch.get_context("u1") is None:
                    break
                await asyncio.sleep(0.01)
        finally:
            await reaper.stop()
        assert await orch.get_context("u1") is None

    async def test_sweep_failure_keeps_loop_alive(
        self, clock: ManualClock, caplog: pytest.LogCaptureFixture
    ) -> None:
        reaper, _, _ = _setup(clock, interval=0.01)
        calls = 0

        async def broken_sweep() -> int:
            nonlocal calls
            calls += 1
            raise RuntimeError("store unavailable")

        reaper.sweep = broken_sweep  # type: ignore[method-assign]
        with caplog.at_level(logging.ERROR, logger="switchboard.orchestration.reaper"):
            reaper.start()
            await asyncio.sleep(0.05)
            assert reaper.running
            await reaper.stop()

        assert calls >= 2
        assert "Session reaper sweep failed" in caplog.text
