"""Retry Scheduler pacing admission attempts.

The scheduler owns nothing but time: it decides how many protocol cycles
to run and sleeps between them. Time is injected through ``Clock`` so
bounded and unbounded waits can be tested without real delays.
"""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Iterator
from typing import Protocol

from semlock.core.constants import DEFAULT_MAX_WAIT, DEFAULT_POLL_INTERVAL, UNBOUNDED

logger = logging.getLogger(__name__)


class Clock(Protocol):
    """Time source used by the scheduler."""

    def monotonic(self) -> float:
        """Return a monotonic timestamp in seconds."""

    def sleep(self, seconds: float) -> None:
        """Suspend the caller for ``seconds``."""


class SystemClock:
    """Real wall-clock time."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


class RetryScheduler:
    """Bounded or unbounded polling loop driver.

    A bounded wait of ``max_wait`` seconds runs
    ``floor(max_wait / interval) + 1`` cycles with one sleep between
    consecutive cycles; ``max_wait == -1`` cycles forever.

    Usage:
        scheduler = RetryScheduler(max_wait=10)
        for attempt in scheduler.cycles():
            if try_once():
                break
        else:
            raise AcquireTimeoutError(...)
    """

    def __init__(
        self,
        max_wait: int = DEFAULT_MAX_WAIT,
        interval: float = DEFAULT_POLL_INTERVAL,
        clock: Clock | None = None,
    ):
        if max_wait < UNBOUNDED:
            raise ValueError(f"max_wait must be >= {UNBOUNDED}, got {max_wait}")
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.max_wait = max_wait
        self.interval = interval
        self.clock = clock or SystemClock()
        self.attempts_made = 0
        self.started_at: float | None = None

    @property
    def unbounded(self) -> bool:
        return self.max_wait == UNBOUNDED

    @property
    def max_attempts(self) -> int | None:
        """Total cycles for a bounded wait, None when unbounded."""
        if self.unbounded:
            return None
        return int(self.max_wait // self.interval) + 1

    @property
    def elapsed(self) -> float:
        if self.started_at is None:
            return 0.0
        return self.clock.monotonic() - self.started_at

    def cycles(self) -> Iterator[int]:
        """Yield 1-based attempt numbers, sleeping one interval between them."""
        self.attempts_made = 0
        self.started_at = self.clock.monotonic()
        limit = self.max_attempts
        counter = itertools.count(1) if limit is None else range(1, limit + 1)

        for attempt in counter:
            if attempt > 1:
                self.clock.sleep(self.interval)
            self.attempts_made = attempt
            yield attempt

        logger.debug(f"Retry budget exhausted after {self.attempts_made} attempt(s) in {self.elapsed:.1f}s")
