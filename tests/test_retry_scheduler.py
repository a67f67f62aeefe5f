"""
Tests for the retry scheduler pacing protocol cycles
"""

import itertools

import pytest

from semlock.core.locks.scheduler import RetryScheduler, SystemClock


class TestBoundedWait:
    """Test cycle counts and sleeps for bounded waits"""

    @pytest.mark.parametrize(
        ("max_wait", "interval", "expected"),
        [(0, 1.0, 1), (1, 1.0, 2), (10, 1.0, 11), (5, 2.0, 3), (1, 0.25, 5)],
    )
    def test_cycle_count(self, fake_clock, max_wait, interval, expected):
        scheduler = RetryScheduler(max_wait, interval, clock=fake_clock)
        assert list(scheduler.cycles()) == list(range(1, expected + 1))
        assert scheduler.max_attempts == expected
        assert scheduler.attempts_made == expected

    def test_sleeps_between_cycles_only(self, fake_clock):
        scheduler = RetryScheduler(3, 1.0, clock=fake_clock)
        list(scheduler.cycles())
        assert fake_clock.sleeps == [1.0, 1.0, 1.0]
        assert scheduler.elapsed == pytest.approx(3.0)

    def test_zero_wait_never_sleeps(self, fake_clock):
        scheduler = RetryScheduler(0, 1.0, clock=fake_clock)
        assert list(scheduler.cycles()) == [1]
        assert fake_clock.sleeps == []

    def test_stopping_early_skips_remaining_sleeps(self, fake_clock):
        scheduler = RetryScheduler(10, 1.0, clock=fake_clock)
        for attempt in scheduler.cycles():
            if attempt == 3:
                break
        assert fake_clock.sleeps == [1.0, 1.0]
        assert scheduler.attempts_made == 3

    def test_cycles_restart_cleanly(self, fake_clock):
        scheduler = RetryScheduler(1, 1.0, clock=fake_clock)
        list(scheduler.cycles())
        assert list(scheduler.cycles()) == [1, 2]


class TestUnboundedWait:
    """Test that -1 keeps cycling"""

    def test_unbounded_cycles_forever(self, fake_clock):
        scheduler = RetryScheduler(-1, 0.5, clock=fake_clock)
        assert scheduler.unbounded
        assert scheduler.max_attempts is None
        assert list(itertools.islice(scheduler.cycles(), 1000)) == list(range(1, 1001))
        assert len(fake_clock.sleeps) == 999


class TestValidation:
    """Test constructor argument validation"""

    def test_rejects_wait_below_unbounded(self):
        with pytest.raises(ValueError, match="max_wait"):
            RetryScheduler(-2)

    @pytest.mark.parametrize("interval", [0, -1.0])
    def test_rejects_non_positive_interval(self, interval):
        with pytest.raises(ValueError, match="interval"):
            RetryScheduler(10, interval)

    def test_defaults_to_system_clock(self):
        scheduler = RetryScheduler()
        assert isinstance(scheduler.clock, SystemClock)
        assert scheduler.max_wait == 10
        assert scheduler.interval == 1.0
        assert scheduler.elapsed == 0.0
