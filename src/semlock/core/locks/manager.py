"""Semaphore lock manager orchestrating one lock name's acquisition."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Callable
from contextlib import AbstractContextManager
from pathlib import Path

from semlock.core.config import WaitConfig
from semlock.core.constants import UNBOUNDED
from semlock.core.exceptions import AcquireTimeoutError, ProtocolViolationError
from semlock.core.locks.guard import CleanupGuard, SignalTrap
from semlock.core.locks.naming import new_holder_id, validate_lock_name
from semlock.core.locks.protocol import AdmissionProtocol, AttemptStatus
from semlock.core.locks.scheduler import Clock, RetryScheduler
from semlock.core.locks.staging import StagingBuilder, staging_root_for
from semlock.core.logging import with_log_context


class SemaphoreLock:
    """Acquire bounded holder slots for named locks in one namespace.

    Usage:
        lock = SemaphoreLock(Path("/tmp/semlock-1000"), max_holders=2)
        lock_id = lock.acquire("jobA")  # absolute holder-entry path

    Args:
        namespace: Absolute, writable lock namespace directory
        max_holders: Semaphore bound; -1 is unbounded
        wait: Retry scheduler configuration
        clock: Time source for the scheduler (default: system clock)
        trap: Active signal trap; protocol cycles run with signals deferred
        logger: Logger for per-name diagnostics
        owner_pid: Pid recorded in modify tokens (default: parent pid)
    """

    def __init__(
        self,
        namespace: Path,
        *,
        max_holders: int = UNBOUNDED,
        wait: WaitConfig | None = None,
        clock: Clock | None = None,
        trap: SignalTrap | None = None,
        logger: logging.Logger | None = None,
        owner_pid: int | None = None,
    ):
        if max_holders < UNBOUNDED:
            raise ValueError(f"max_holders must be >= {UNBOUNDED}, got {max_holders}")
        self.namespace = Path(namespace)
        self.max_holders = max_holders
        self.wait = wait or WaitConfig()
        self.clock = clock
        self.trap = trap
        self.logger = logger or logging.getLogger(__name__)
        self.owner_pid = owner_pid

    def _deferred(self) -> AbstractContextManager[None]:
        if self.trap is None:
            return contextlib.nullcontext()
        return self.trap.deferred()

    def acquire(self, lock_name: str, on_admitted: Callable[[str], None] | None = None) -> str:
        """Acquire one holder slot for ``lock_name``.

        ``on_admitted`` runs with signals deferred immediately after
        admission, so an interrupt can never separate admitting a holder from
        reporting it.

        Returns:
            The lock id: ``<namespace>/<name>/<name>/<holder-id>``

        Raises:
            InvalidLockNameError: Before touching the filesystem
            StagingError: If staging or publishing hits an I/O error
            AcquireTimeoutError: If the wait bound is exhausted
            ProtocolViolationError: If admission was invalidated
            AcquireInterrupted: If a trapped signal arrives
        """
        validate_lock_name(lock_name)
        log = with_log_context(self.logger, lock_name=lock_name)

        holder_id = new_holder_id()
        scheduler = RetryScheduler(self.wait.max_wait, self.wait.poll_interval, clock=self.clock)

        with CleanupGuard(staging_root_for(self.namespace, holder_id), lock_name, trap=self.trap) as guard:
            tree = StagingBuilder(self.namespace).build(lock_name, holder_id)
            protocol = AdmissionProtocol(self.namespace, tree, guard, self.max_holders, owner_pid=self.owner_pid)

            for attempt in scheduler.cycles():
                with self._deferred():
                    result = protocol.attempt()
                    if result.status is AttemptStatus.ADMITTED:
                        if on_admitted is not None:
                            on_admitted(result.lock_id)
                        how = "published" if result.published else f"joined {result.holders_seen} holder(s)"
                        log.info(f"Acquired '{lock_name}' on attempt {attempt} ({how})")
                        return result.lock_id

                if result.status is AttemptStatus.ABORTED:
                    raise ProtocolViolationError(lock_name, path=protocol.lock_id, original_error=result.error)

                log.debug(f"Attempt {attempt} for '{lock_name}': {result.status.value}")

        log.info(f"Gave up on '{lock_name}' after {scheduler.attempts_made} attempt(s)")
        raise AcquireTimeoutError(lock_name, scheduler.attempts_made, self.wait.max_wait)
