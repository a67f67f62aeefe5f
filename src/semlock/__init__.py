"""
semlock - Filesystem semaphore locks

Lets unrelated processes share a bounded number of slots for a named
critical section, using only atomic filesystem operations.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any

from semlock.core.version import __version__

__all__ = ["__version__", "BatchAcquirer", "SemaphoreLock", "main"]

_LAZY_EXPORTS = {
    "BatchAcquirer": "semlock.pipeline.batch",
    "SemaphoreLock": "semlock.core.locks.manager",
    "main": "semlock.cli.main",
}

if TYPE_CHECKING:
    from semlock.cli.main import main
    from semlock.core.locks.manager import SemaphoreLock
    from semlock.pipeline.batch import BatchAcquirer


def __getattr__(name: str) -> Any:
    if name in _LAZY_EXPORTS:
        return getattr(importlib.import_module(_LAZY_EXPORTS[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
