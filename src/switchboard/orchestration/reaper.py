"""Background eviction of idle conversation contexts."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING

from switchboard.orchestration.config import ReaperConfig

if TYPE_CHECKING:
    from switchboard.orchestration.orchestrator import Orchestrator

logger = logging.getLogger("switchboard.orchestration.reaper")


class SessionReaper:
    """Periodically evicts contexts idle for longer than ``idle_timeout``.

    Eviction goes through ``Orchestrator.evict_if_idle``, which takes the
    same per-user lock as ordinary turns, so a sweep never races an
    in-flight turn for that user.  Eviction is lossy on purpose: the next
    message from an evicted user starts with no agent.
    """

    def __init__(self, orchestrator: Orchestrator, config: ReaperConfig | None = None) -> None:
        self._orchestrator = orchestrator
        self._config = config or ReaperConfig()
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep(self) -> int:
        """Run one sweep now. Returns the number of contexts evicted."""
        evicted = await self._orchestrator.sweep_idle(self._config.max_idle)
        logger.debug("Sweep evicted %d contexts", evicted)
        return evicted

    def start(self) -> None:
        """Start the periodic sweep. Needs a running event loop."""
        if not self._config.enabled:
            logger.debug("Session reaper disabled")
            return
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="switchboard:reaper")
        self._task.add_done_callback(self._task_done)
        logger.info(
            "Session reaper started",
            extra={"interval": self._config.interval, "idle_timeout": self._config.idle_timeout},
        )

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._config.interval)
            try:
                await self.sweep()
            except Exception:
                logger.exception("Session reaper sweep failed")

    @staticmethod
    def _task_done(task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Session reaper stopped unexpectedly: %s", exc)
