"""Pipeline models for batch lock acquisition."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AcquireResult:
    """Result of acquiring a single lock name"""

    lock_name: str
    success: bool
    duration: float
    lock_id: str = ""
    error_type: str = ""
    error_message: str = ""

    @property
    def timed_out(self) -> bool:
        return self.error_type == "AcquireTimeoutError"


@dataclass
class BatchResult:
    """Aggregate outcome of one batch, in request order."""

    total: int
    results: list[AcquireResult] = field(default_factory=list)
    duration: float = 0.0
    interrupted: int | None = None  # Signal number when the batch was cut short

    @property
    def successful(self) -> list[AcquireResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[AcquireResult]:
        return [r for r in self.results if not r.success]

    @property
    def lock_ids(self) -> list[str]:
        return [r.lock_id for r in self.successful]

    @property
    def success(self) -> bool:
        """True if at least one requested name was admitted."""
        return bool(self.successful)

    @property
    def exit_code(self) -> int:
        if self.interrupted is not None:
            return 128 + self.interrupted
        return 0 if self.success else 1
