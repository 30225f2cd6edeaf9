"""Circuit breaker guarding calls to the completion service."""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import StrEnum, unique


@unique
class BreakerState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    """Consecutive-failure breaker for the classification call.

    After ``failure_threshold`` failures in a row the breaker opens and
    refuses requests.  Once ``recovery_timeout`` seconds have passed it is
    half-open and lets exactly one probe through; the probe's outcome
    either closes it again or restarts the open period.

    All transitions are synchronous, so they are atomic on the event loop.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout: float = 60.0,
        *,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        self._threshold = failure_threshold
        self._recovery_timeout = recovery_timeout
        self._monotonic = monotonic
        self._failures = 0
        self._tripped_at: float | None = None
        self._probing = False

    @property
    def state(self) -> BreakerState:
        if self._tripped_at is None:
            return BreakerState.CLOSED
        if self._monotonic() - self._tripped_at < self._recovery_timeout:
            return BreakerState.OPEN
        return BreakerState.HALF_OPEN

    @property
    def is_open(self) -> bool:
        return self.state is BreakerState.OPEN

    @property
    def is_half_open(self) -> bool:
        return self.state is BreakerState.HALF_OPEN

    @property
    def is_closed(self) -> bool:
        return self.state is BreakerState.CLOSED

    @property
    def failure_count(self) -> int:
        return self._failures

    def allow_request(self) -> bool:
        """Whether the caller may attempt a request now.

        In the half-open state only the first caller gets ``True``.
        """
        state = self.state
        if state is BreakerState.CLOSED:
            return True
        if state is BreakerState.HALF_OPEN and not self._probing:
            self._probing = True
            return True
        return False

    def record_success(self) -> None:
        self.reset()

    def record_failure(self) -> None:
        self._failures += 1
        if self._probing or self._failures >= self._threshold:
            self._tripped_at = self._monotonic()
            self._probing = False

    def reset(self) -> None:
        self._failures = 0
        self._tripped_at = None
        self._probing = False
