"""Cleanup Guard and signal trap.

Design principles:
- A guard owns exactly the artifacts its own process created: the staging
  tree for the current attempt and, while held, the modify token.
- Removal is best-effort: failures are logged and never raised.
- Signals become ``AcquireInterrupted`` exceptions so that ordinary
  ``with``/``finally`` unwinding performs cleanup; nothing relies on atexit.
"""

from __future__ import annotations

import contextlib
import logging
import shutil
import signal
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path

from semlock.core.exceptions import AcquireInterrupted

logger = logging.getLogger(__name__)


def _default_signals() -> tuple[int, ...]:
    names = ("SIGINT", "SIGTERM", "SIGHUP")
    return tuple(getattr(signal, name) for name in names if hasattr(signal, name))


class SignalTrap:
    """Convert termination signals into ``AcquireInterrupted`` while active.

    Only the main thread may install signal handlers; elsewhere the trap is
    inert and ``deferred()`` is a no-op wrapper.

    Usage:
        with SignalTrap() as trap:
            with trap.deferred():
                ...  # signals arriving here are raised on block exit
    """

    def __init__(self, signals: Iterable[int] | None = None):
        self.signals = tuple(signals) if signals is not None else _default_signals()
        self.received: int | None = None
        self._previous: dict[int, object] = {}
        self._deferring = 0
        self._pending: int | None = None

    @property
    def installed(self) -> bool:
        return bool(self._previous)

    def __enter__(self) -> SignalTrap:
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Signal trap disabled outside the main thread")
            return self
        for signum in self.signals:
            try:
                self._previous[signum] = signal.getsignal(signum)
                signal.signal(signum, self._handle)
            except (OSError, ValueError) as e:
                self._previous.pop(signum, None)
                logger.debug(f"Cannot trap signal {signum}: {e}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        for signum, previous in self._previous.items():
            handler = previous if previous is not None else signal.SIG_DFL
            with contextlib.suppress(OSError, ValueError, TypeError):
                signal.signal(signum, handler)
        self._previous.clear()

    def _handle(self, signum: int, frame: object) -> None:
        del frame
        self.received = signum
        if self._deferring:
            self._pending = signum
            return
        raise AcquireInterrupted(signum)

    def check(self) -> None:
        """Raise a signal that arrived during a deferred block, if any."""
        if self._deferring or self._pending is None:
            return
        signum, self._pending = self._pending, None
        raise AcquireInterrupted(signum)

    @contextlib.contextmanager
    def deferred(self) -> Iterator[None]:
        """Hold signal delivery until the block completes."""
        self._deferring += 1
        try:
            yield
        finally:
            self._deferring -= 1
        self.check()


class CleanupGuard:
    """Scoped owner of one attempt's staging tree and modify token.

    The staging root is registered before it is created, so an interrupt
    between ``mkdir`` and bookkeeping still gets cleaned up. Its name embeds
    this process's unique holder id, so no other process can own it.

    Args:
        staging_root: Private staging directory of this attempt
        lock_name: Lock name, for log context only
        trap: Optional signal trap deferring signals during cleanup
    """

    def __init__(self, staging_root: Path, lock_name: str | None = None, trap: SignalTrap | None = None):
        self.staging_root = staging_root
        self.lock_name = lock_name
        self.trap = trap
        self.token_path: Path | None = None
        self.closed = False

    def __enter__(self) -> CleanupGuard:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.trap is not None:
            with self.trap.deferred():
                self.release()
        else:
            self.release()

    @property
    def holds_token(self) -> bool:
        return self.token_path is not None

    def hold_token(self, token_path: Path) -> None:
        """Register a modify token this process has just created."""
        self.token_path = token_path

    def drop_token(self) -> bool:
        """Remove the held modify token. Returns False if removal failed."""
        token_path, self.token_path = self.token_path, None
        if token_path is None:
            return True
        try:
            token_path.unlink()
        except FileNotFoundError:
            logger.warning(f"Modify token {token_path} vanished while held")
        except OSError as e:
            logger.warning(f"Failed to remove modify token {token_path}: {e}")
            return False
        return True

    def release(self) -> None:
        """Remove every artifact still owned by this guard."""
        if self.closed:
            return
        self.drop_token()
        try:
            shutil.rmtree(self.staging_root)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Failed to remove staging tree {self.staging_root}: {e}")
        self.closed = True
