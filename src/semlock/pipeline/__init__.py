"""Pipeline module - batch orchestration."""

from semlock.pipeline.batch import BatchAcquirer
from semlock.pipeline.models import AcquireResult, BatchResult

__all__ = [
    "AcquireResult",
    "BatchAcquirer",
    "BatchResult",
]
