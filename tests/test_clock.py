"""Tests for the injectable clocks."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from switchboard.core.clock import ManualClock, SystemClock


class TestManualClock:
    def test_default_start(self) -> None:
        assert ManualClock().now() == datetime(2024, 1, 1, tzinfo=UTC)

    def test_advance_by_delta_and_kwargs(self) -> None:
        clock = ManualClock()
        start = clock.now()
        clock.advance(timedelta(minutes=5))
        clock.advance(hours=1)
        assert clock.now() - start == timedelta(hours=1, minutes=5)

    def test_advance_returns_new_time(self) -> None:
        clock = ManualClock()
        assert clock.advance(seconds=30) == clock.now()

    def test_cannot_go_backwards(self) -> None:
        with pytest.raises(ValueError):
            ManualClock().advance(timedelta(seconds=-1))

    def test_set(self) -> None:
        clock = ManualClock()
        when = datetime(2025, 6, 1, 18, 30, tzinfo=UTC)
        clock.set(when)
        assert clock.now() == when


class TestSystemClock:
    def test_now_is_aware_utc(self) -> None:
        now = SystemClock().now()
        assert now.tzinfo is UTC
        assert abs(datetime.now(UTC) - now) < timedelta(seconds=5)
