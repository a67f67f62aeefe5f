"""Publish/Admit protocol.

One call to ``AdmissionProtocol.attempt()`` runs a single cycle of the
state machine::

    TRY_PUBLISH -> PUBLISHED -> ADMITTED
                -> JOIN_EXISTING -> ADMITTED | CONTENDED | CAPACITY_EXCEEDED
                                  | GROUP_VANISHED | ABORTED

Atomicity comes from the filesystem only:
- publish is a rename of the staged outer node onto the group position,
  which succeeds for at most one racer;
- joining requires the modify token, created with ``O_CREAT | O_EXCL``,
  which turns count-then-admit into a critical section.

Pacing between cycles belongs to ``RetryScheduler``.
"""

from __future__ import annotations

import errno
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from semlock.core.constants import MODIFY_TOKEN_NAME, UNBOUNDED
from semlock.core.exceptions import StagingError
from semlock.core.locks.guard import CleanupGuard
from semlock.core.locks.staging import StagingTree

logger = logging.getLogger(__name__)

# rename(2) reports an occupied destination with either errno
_RENAME_DESTINATION_TAKEN = frozenset({errno.EEXIST, errno.ENOTEMPTY})


@dataclass(frozen=True)
class LockGroupPaths:
    """On-disk layout of one lock group.

    ``<namespace>/<name>`` is the group, ``<namespace>/<name>/<name>`` holds
    one directory per holder, and ``<namespace>/<name>/.modify`` is the token.
    """

    namespace: Path
    lock_name: str

    @property
    def group(self) -> Path:
        return self.namespace / self.lock_name

    @property
    def holders(self) -> Path:
        return self.group / self.lock_name

    @property
    def token(self) -> Path:
        return self.group / MODIFY_TOKEN_NAME

    def holder(self, holder_id: str) -> Path:
        return self.holders / holder_id


class AttemptStatus(Enum):
    """Outcome of one protocol cycle."""

    ADMITTED = "admitted"
    CONTENDED = "contended"  # Modify token held by another joiner
    CAPACITY_EXCEEDED = "capacity_exceeded"
    GROUP_VANISHED = "group_vanished"  # Group torn down mid-cycle
    ABORTED = "aborted"  # Holder creation failed after admission check

    @property
    def retryable(self) -> bool:
        return self in (AttemptStatus.CONTENDED, AttemptStatus.CAPACITY_EXCEEDED, AttemptStatus.GROUP_VANISHED)


@dataclass
class AttemptResult:
    status: AttemptStatus
    lock_id: str | None = None
    published: bool = False
    holders_seen: int | None = None
    error: OSError | None = None


def _write_all(fd: int, payload: bytes) -> None:
    """Write complete payload to fd, handling short writes."""
    total_written = 0
    while total_written < len(payload):
        written = os.write(fd, payload[total_written:])
        if written <= 0:
            raise OSError("short write while recording modify token owner")
        total_written += written


def count_holders(holders_dir: Path) -> int:
    """Count holder entries by direct enumeration of the holder container."""
    with os.scandir(holders_dir) as entries:
        return sum(1 for entry in entries if entry.is_dir(follow_symlinks=False))


def read_token_pid(token_path: Path) -> int | None:
    """Read the owning pid recorded in a modify token, for diagnostics."""
    try:
        content = token_path.read_text(encoding="utf-8").strip()
    except OSError:
        return None
    try:
        return int(content)
    except ValueError:
        return None


class AdmissionProtocol:
    """State machine admitting one holder into a lock group.

    Args:
        namespace: Resolved lock namespace root
        tree: Staging tree built for this attempt
        guard: Cleanup guard owning the staging tree and modify token
        max_holders: Semaphore bound; -1 is unbounded
        owner_pid: Pid recorded in the modify token (default: parent pid)
    """

    def __init__(
        self,
        namespace: Path,
        tree: StagingTree,
        guard: CleanupGuard,
        max_holders: int = UNBOUNDED,
        owner_pid: int | None = None,
    ):
        if max_holders < UNBOUNDED:
            raise ValueError(f"max_holders must be >= {UNBOUNDED}, got {max_holders}")
        self.paths = LockGroupPaths(namespace, tree.lock_name)
        self.tree = tree
        self.guard = guard
        self.max_holders = max_holders
        self.owner_pid = owner_pid if owner_pid is not None else os.getppid()

    @property
    def lock_id(self) -> str:
        """Absolute path of this attempt's holder entry once admitted."""
        return str(self.paths.holder(self.tree.holder_id))

    def _has_capacity(self, holders: int) -> bool:
        return self.max_holders == UNBOUNDED or holders < self.max_holders

    def attempt(self) -> AttemptResult:
        """Run one TRY_PUBLISH / JOIN_EXISTING cycle."""
        if self.max_holders == 0:
            # A published group would already hold one entry.
            return AttemptResult(AttemptStatus.CAPACITY_EXCEEDED, holders_seen=None)

        if not self.paths.group.is_dir() and self._try_publish():
            logger.debug(f"Published new lock group {self.paths.group}")
            return AttemptResult(AttemptStatus.ADMITTED, lock_id=self.lock_id, published=True, holders_seen=0)

        return self._join_existing()

    def _try_publish(self) -> bool:
        """Rename the staged outer node into place. True if this process won."""
        try:
            os.rename(self.tree.outer, self.paths.group)
        except OSError as e:
            if e.errno in _RENAME_DESTINATION_TAKEN:
                logger.debug(f"Lost publish race for {self.paths.group}; joining")
                return False
            raise StagingError(self.tree.lock_name, path=str(self.paths.group), original_error=e) from e
        return True

    def _acquire_token(self) -> AttemptStatus | None:
        """Create the modify token. Returns a retry status if not acquired."""
        token_path = self.paths.token
        try:
            fd = os.open(str(token_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return AttemptStatus.CONTENDED
        except FileNotFoundError:
            return AttemptStatus.GROUP_VANISHED
        except OSError as e:
            raise StagingError(self.tree.lock_name, path=str(token_path), original_error=e) from e

        self.guard.hold_token(token_path)
        try:
            _write_all(fd, f"{self.owner_pid}\n".encode())
        except OSError as e:
            # Owner pid is informational; exclusivity comes from O_EXCL.
            logger.debug(f"Could not record owner in {token_path}: {e}")
        finally:
            os.close(fd)
        return None

    def _join_existing(self) -> AttemptResult:
        retry_status = self._acquire_token()
        if retry_status is not None:
            return AttemptResult(retry_status)

        try:
            holders = count_holders(self.paths.holders)
        except FileNotFoundError:
            self.guard.drop_token()
            return AttemptResult(AttemptStatus.GROUP_VANISHED)
        except OSError as e:
            self.guard.drop_token()
            raise StagingError(self.tree.lock_name, path=str(self.paths.holders), original_error=e) from e

        if not self._has_capacity(holders):
            self.guard.drop_token()
            return AttemptResult(AttemptStatus.CAPACITY_EXCEEDED, holders_seen=holders)

        holder_path = self.paths.holder(self.tree.holder_id)
        try:
            holder_path.mkdir()
        except OSError as e:
            self.guard.drop_token()
            logger.error(f"Holder entry {holder_path} could not be created after admission: {e}")
            return AttemptResult(AttemptStatus.ABORTED, holders_seen=holders, error=e)

        self.guard.drop_token()
        return AttemptResult(AttemptStatus.ADMITTED, lock_id=self.lock_id, holders_seen=holders)
