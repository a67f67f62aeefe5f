"""Core module - Foundation components with no internal dependencies.

This module provides the basic building blocks used throughout the application:
- Version information
- Custom exceptions
- Configuration dataclasses
- Constants and defaults
- Console colors and formatting utilities
"""

from semlock.core.version import __version__

from semlock.core.exceptions import (
    SemLockError,
    ConfigurationError,
    InvalidLockNameError,
    LockAttemptError,
    StagingError,
    AcquireTimeoutError,
    ProtocolViolationError,
    AcquireInterrupted,
)

from semlock.core.config import (
    WaitConfig,
    LogConfig,
    SemLockConfig,
)

from semlock.core.constants import (
    STAGING_PREFIX,
    MODIFY_TOKEN_NAME,
    UNBOUNDED,
    DEFAULT_MAX_HOLDERS,
    DEFAULT_MAX_WAIT,
    DEFAULT_POLL_INTERVAL,
    LOCK_DIR_ENV,
    MAX_HOLDERS_ENV,
    MAX_WAIT_ENV,
    effective_acquire_defaults,
)

from semlock.core.colors import (
    ConsoleColors,
    _format_error_msg,
)

__all__ = [
    # Version
    '__version__',
    # Exceptions
    'SemLockError',
    'ConfigurationError',
    'InvalidLockNameError',
    'LockAttemptError',
    'StagingError',
    'AcquireTimeoutError',
    'ProtocolViolationError',
    'AcquireInterrupted',
    # Config dataclasses
    'WaitConfig',
    'LogConfig',
    'SemLockConfig',
    # Constants
    'STAGING_PREFIX',
    'MODIFY_TOKEN_NAME',
    'UNBOUNDED',
    'DEFAULT_MAX_HOLDERS',
    'DEFAULT_MAX_WAIT',
    'DEFAULT_POLL_INTERVAL',
    'LOCK_DIR_ENV',
    'MAX_HOLDERS_ENV',
    'MAX_WAIT_ENV',
    'effective_acquire_defaults',
    # Colors
    'ConsoleColors',
    '_format_error_msg',
]
