"""Injectable wall clock for timestamps and idle-time arithmetic."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta


class Clock(ABC):
    """Source of the current time.

    Everything that stamps or compares timestamps (the context store,
    the orchestrator, the reaper, agents) takes a ``Clock`` so tests can
    move time forward without sleeping.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        ...


class SystemClock(Clock):
    """Real time from the system clock."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class ManualClock(Clock):
    """Clock that only moves when told to.

    Usage::

        clock = ManualClock()
        store = InMemoryContextStore(clock=clock)
        ...
        clock.advance(hours=25)
        await store.sweep_older_than(timedelta(hours=24))
    """

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def now(self) -> datetime:
        return self._now

    def advance(self, delta: timedelta | None = None, **kwargs: float) -> datetime:
        """Move the clock forward by *delta* (or ``timedelta(**kwargs)``)."""
        step = delta if delta is not None else timedelta(**kwargs)
        if step < timedelta(0):
            raise ValueError("ManualClock cannot move backwards")
        self._now += step
        return self._now

    def set(self, when: datetime) -> None:
        self._now = when
