"""Filesystem semaphore subsystem for cross-process coordination.

This package composes staging, the publish/admit protocol, retry pacing
and cleanup behind ``SemaphoreLock`` so callers use a stable API.
"""

from semlock.core.locks.guard import CleanupGuard, SignalTrap
from semlock.core.locks.manager import SemaphoreLock
from semlock.core.locks.naming import new_holder_id, validate_lock_name
from semlock.core.locks.protocol import (
    AdmissionProtocol,
    AttemptResult,
    AttemptStatus,
    LockGroupPaths,
    count_holders,
    read_token_pid,
)
from semlock.core.locks.scheduler import Clock, RetryScheduler, SystemClock
from semlock.core.locks.staging import StagingBuilder, StagingTree, staging_root_for

__all__ = [
    "AdmissionProtocol",
    "AttemptResult",
    "AttemptStatus",
    "CleanupGuard",
    "Clock",
    "LockGroupPaths",
    "RetryScheduler",
    "SemaphoreLock",
    "SignalTrap",
    "StagingBuilder",
    "StagingTree",
    "SystemClock",
    "count_holders",
    "new_holder_id",
    "read_token_pid",
    "staging_root_for",
    "validate_lock_name",
]
