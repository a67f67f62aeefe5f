"""Configuration dataclasses for semlock.

These dataclasses centralize all configuration options for type safety
and easy testing. They can be created from command-line arguments or
used directly in code.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
from typing import Any

from semlock.core.constants import LOG_FILE_BACKUP_COUNT, LOG_FILE_MAX_BYTES


@dataclass
class WaitConfig:
    """Configuration for the retry scheduler.

    Attributes:
        max_wait: Maximum wait in seconds; -1 waits forever (default: 10)
        poll_interval: Seconds slept between protocol cycles (default: 1.0)
    """

    max_wait: int = 10
    poll_interval: float = 1.0

    @property
    def unbounded(self) -> bool:
        return self.max_wait < 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for diagnostics."""
        return {
            "max_wait": self.max_wait,
            "poll_interval": self.poll_interval,
        }


@dataclass
class LogConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level string; None defers to $LOG_LEVEL, then WARNING
        format: "text" or "json" (default: "text")
        file: Optional log file path; console only when unset
        file_max_bytes: Maximum size per log file (default: 1MB)
        file_backup_count: Number of backup log files (default: 3)
    """

    level: str | None = None
    format: str = "text"
    file: str | None = None
    file_max_bytes: int = LOG_FILE_MAX_BYTES
    file_backup_count: int = LOG_FILE_BACKUP_COUNT


@dataclass
class SemLockConfig:
    """Master configuration for one semlock invocation.

    Attributes:
        max_holders: Semaphore bound; -1 is unbounded (default: -1)
        lock_dir: Explicit lock namespace override (default: resolved)
        wait: Retry scheduler configuration
        log: Logging configuration
        quiet: Hide the progress bar
    """

    max_holders: int = -1
    lock_dir: str | None = None
    wait: WaitConfig = field(default_factory=WaitConfig)
    log: LogConfig = field(default_factory=LogConfig)
    quiet: bool = False

    @property
    def unbounded(self) -> bool:
        return self.max_holders < 0

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> SemLockConfig:
        """Create configuration from parsed command-line arguments."""
        return cls(
            max_holders=getattr(args, "max_holders", -1),
            lock_dir=getattr(args, "lock_dir", None),
            wait=WaitConfig(
                max_wait=getattr(args, "max_wait", 10),
                poll_interval=getattr(args, "poll_interval", 1.0),
            ),
            log=LogConfig(
                level=getattr(args, "log_level", None),
                format=getattr(args, "log_format", "text"),
                file=getattr(args, "log_file", None),
            ),
            quiet=getattr(args, "quiet", False),
        )
