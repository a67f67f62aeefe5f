"""Custom exceptions for semlock.

All exception classes are designed to provide clear, actionable error messages
with context about which lock name failed and why.
"""


class SemLockError(Exception):
    """Base exception for all semlock errors."""

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ConfigurationError(SemLockError):
    """Exception raised for configuration-related errors.

    Examples:
        - Lock directory cannot be created
        - Lock directory is not writable
        - Invalid numeric option values
    """

    def __init__(self, message: str, field: str | None = None, details: str | None = None):
        self.field = field
        super().__init__(message, details)


class InvalidLockNameError(SemLockError):
    """Raised when a requested lock name is reserved or malformed.

    Always raised before any filesystem mutation for that name.
    """

    def __init__(self, lock_name: str, reason: str):
        self.lock_name = lock_name
        self.reason = reason
        super().__init__(f"Invalid lock name {lock_name!r}", reason)


class LockAttemptError(SemLockError):
    """Base exception for runtime failures scoped to one lock name."""

    def __init__(
        self,
        message: str,
        lock_name: str,
        path: str | None = None,
        details: str | None = None,
        original_error: Exception | None = None,
    ):
        self.lock_name = lock_name
        self.path = path
        self.original_error = original_error
        super().__init__(message, details)

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"at {self.path}")
        if self.details:
            parts.append(self.details)
        return " - ".join(parts)


class StagingError(LockAttemptError):
    """Raised when the shared filesystem rejects staging or publishing.

    Examples:
        - Permission denied in the lock directory
        - Disk quota exceeded
        - Transient unavailability of a network filesystem
    """

    def __init__(self, lock_name: str, path: str | None = None, original_error: Exception | None = None):
        details = str(original_error) if original_error is not None else None
        super().__init__(
            f"Cannot stage lock '{lock_name}'",
            lock_name,
            path=path,
            details=details,
            original_error=original_error,
        )


class AcquireTimeoutError(LockAttemptError):
    """Raised when the wait bound is exhausted without admission.

    This is the expected outcome under contention; callers may retry later.

    Attributes:
        attempts: Number of protocol cycles that were run
        max_wait: Configured wait bound in seconds
    """

    def __init__(self, lock_name: str, attempts: int, max_wait: int):
        self.attempts = attempts
        self.max_wait = max_wait
        super().__init__(
            f"Timed out waiting for lock '{lock_name}'",
            lock_name,
            details=f"{attempts} attempt(s) within {max_wait}s",
        )


class ProtocolViolationError(LockAttemptError):
    """Raised when the holder entry cannot be created after admission.

    The modify token should make the count-then-admit window atomic, so this
    indicates a foreign process mutated the lock group out of protocol.
    """

    def __init__(self, lock_name: str, path: str | None = None, original_error: Exception | None = None):
        details = str(original_error) if original_error is not None else None
        super().__init__(
            f"Admission for lock '{lock_name}' was invalidated",
            lock_name,
            path=path,
            details=details,
            original_error=original_error,
        )


class AcquireInterrupted(SemLockError):
    """Raised from a signal handler while an acquisition is in flight.

    Attributes:
        signum: Signal number that interrupted the process
    """

    def __init__(self, signum: int):
        self.signum = signum
        super().__init__("Interrupted by signal", f"signal {signum}")

    @property
    def exit_code(self) -> int:
        return 128 + self.signum
