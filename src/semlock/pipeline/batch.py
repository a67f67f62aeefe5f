"""Batch driver acquiring a list of lock names independently."""

from __future__ import annotations

import contextlib
import logging
import sys
import time
import uuid
from collections.abc import Callable
from contextlib import AbstractContextManager

from tqdm import tqdm

from semlock.core.colors import ConsoleColors, _format_error_msg
from semlock.core.exceptions import AcquireInterrupted, SemLockError
from semlock.core.locks.guard import SignalTrap
from semlock.core.locks.manager import SemaphoreLock
from semlock.pipeline.models import AcquireResult, BatchResult


def _print_lock_id(lock_id: str) -> None:
    print(lock_id, flush=True)


def _print_warning(message: str) -> None:
    tqdm.write(ConsoleColors.warning(f"WARNING: {message}"), file=sys.stderr)


class BatchAcquirer:
    """
    Acquire several lock names in request order, one at a time.

    Each name succeeds or fails on its own: a failure is reported as a
    single-line warning and the batch moves on. Lock ids are emitted the
    moment they are admitted, so an interrupted batch has already reported
    everything it holds.

    Args:
        lock: Configured semaphore lock manager
        emit: Callback receiving each admitted lock id (default: stdout)
        warn: Callback receiving per-name warnings (default: stderr)
        quiet: Hide the progress bar (default: False)
        logger: Logger for batch diagnostics
        trap: Active signal trap (default: the lock's own trap)
    """

    def __init__(
        self,
        lock: SemaphoreLock,
        *,
        emit: Callable[[str], None] | None = None,
        warn: Callable[[str], None] | None = None,
        quiet: bool = False,
        logger: logging.Logger | None = None,
        trap: SignalTrap | None = None,
    ):
        self.lock = lock
        self.emit = emit or _print_lock_id
        self.warn = warn or _print_warning
        self.quiet = quiet
        self.logger = logger or logging.getLogger(__name__)
        self.trap = trap if trap is not None else getattr(lock, "trap", None)
        self.batch_id = str(uuid.uuid4())[:8]  # Short correlation ID for log tracing

    def acquire_all(self, lock_names: list[str]) -> BatchResult:
        """
        Acquire every name in ``lock_names``.

        A trapped signal stops the batch wherever it lands: inside an
        acquisition, between names or while the summary is written. It is
        recorded in ``BatchResult.interrupted`` rather than raised.

        Args:
            lock_names: Lock names in request order

        Returns:
            BatchResult; ``success`` is True if at least one name was admitted
        """
        batch = BatchResult(total=len(lock_names))
        batch_start_time = time.time()
        current: str | None = None
        recorded = 0

        try:
            self.logger.info(
                f"[{self.batch_id}] Acquiring {len(lock_names)} lock(s) in {self.lock.namespace} "
                f"(max_holders={self.lock.max_holders}, max_wait={self.lock.wait.max_wait})"
            )
            with tqdm(
                total=len(lock_names),
                desc="Acquiring locks",
                unit="lock",
                leave=False,
                disable=True if self.quiet else None,
            ) as pbar:
                for lock_name in lock_names:
                    current, recorded = lock_name, len(batch.results)
                    self._acquire_one(lock_name, batch)
                    pbar.update(1)
        except AcquireInterrupted as e:
            signum = e.signum
            # A name whose acquisition was cut short still gets a failed result
            unfinished = current if current is not None and len(batch.results) == recorded else None
            self._shielded(batch, lambda: self._record_interrupt(batch, unfinished, signum))

        def _summarize() -> None:
            batch.duration = time.time() - batch_start_time
            self.logger.info(
                f"[{self.batch_id}] Done: {len(batch.successful)} acquired, {len(batch.failed)} failed "
                f"in {batch.duration:.2f}s"
            )

        self._shielded(batch, _summarize)
        return batch

    def _deferred(self) -> AbstractContextManager[None]:
        if self.trap is None:
            return contextlib.nullcontext()
        return self.trap.deferred()

    def _shielded(self, batch: BatchResult, step: Callable[[], None]) -> None:
        """Run bookkeeping with signals held; a signal arriving meanwhile only marks the batch."""
        try:
            with self._deferred():
                step()
        except AcquireInterrupted as e:
            if batch.interrupted is None:
                batch.interrupted = e.signum

    def _record_interrupt(self, batch: BatchResult, lock_name: str | None, signum: int) -> None:
        batch.interrupted = signum
        if lock_name is None:
            self.warn(f"Interrupted by signal {signum}; stopping")
            return
        batch.results.append(
            AcquireResult(
                lock_name=lock_name,
                success=False,
                duration=0.0,
                error_type=AcquireInterrupted.__name__,
                error_message=str(AcquireInterrupted(signum)),
            )
        )
        self.warn(f"Interrupted by signal {signum} while acquiring '{lock_name}'; stopping")

    def _acquire_one(self, lock_name: str, batch: BatchResult) -> None:
        started = time.time()

        def _on_admitted(lock_id: str) -> None:
            batch.results.append(
                AcquireResult(lock_name=lock_name, success=True, duration=time.time() - started, lock_id=lock_id)
            )
            self.emit(lock_id)

        try:
            self.lock.acquire(lock_name, on_admitted=_on_admitted)
        except AcquireInterrupted:
            raise
        except SemLockError as e:
            batch.results.append(
                AcquireResult(
                    lock_name=lock_name,
                    success=False,
                    duration=time.time() - started,
                    error_type=type(e).__name__,
                    error_message=str(e),
                )
            )
            self.logger.debug(f"[{self.batch_id}] {type(e).__name__} for '{lock_name}': {e}")
            self.warn(_format_error_msg("acquiring lock", lock_name, e))
