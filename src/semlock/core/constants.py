"""Constants and default values for semlock.

This module centralizes the on-disk naming conventions, environment variable
names and default configurations used throughout the application.
"""

import logging
import math
import os
import re
from collections.abc import Callable
from typing import Any

# ==================== ON-DISK LAYOUT ====================

# Prefix of the private per-attempt staging directory under the namespace root
STAGING_PREFIX: str = ".stage."
STAGING_NAME_PATTERN = re.compile(r"^\.stage\.")

# Exclusive-create marker serializing count-then-admit inside a lock group
MODIFY_TOKEN_NAME: str = ".modify"

# Characters that may never appear in a lock name
FORBIDDEN_NAME_CHARS: tuple[str, ...] = ("/", ":", "\0")

# ASCII control characters; a line break in a name would split its lock id across stdout lines
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x1f\x7f]")

# Names that would alias the namespace itself
RESERVED_PATH_ALIASES: frozenset[str] = frozenset({".", ".."})

# ==================== SEMAPHORE DEFAULTS ====================

UNBOUNDED: int = -1  # Sentinel for unbounded holders / unbounded wait
DEFAULT_MAX_HOLDERS: int = UNBOUNDED
DEFAULT_MAX_WAIT: int = 10  # Seconds
DEFAULT_POLL_INTERVAL: float = 1.0  # Seconds between protocol cycles

# ==================== NAMESPACE RESOLUTION ====================

LOCK_DIR_ENV: str = "SEMLOCK_DIR"
RUNTIME_DIR_ENV: str = "XDG_RUNTIME_DIR"
RUNTIME_DIR_SUBPATH: str = "semlock"
FALLBACK_LOCK_DIR_TEMPLATE: str = "/tmp/semlock-{uid}"

# ==================== ENVIRONMENT OVERRIDES ====================

MAX_HOLDERS_ENV: str = "SEMLOCK_MAX_HOLDERS"
MAX_WAIT_ENV: str = "SEMLOCK_MAX_WAIT"

# ==================== LOGGING DEFAULTS ====================

LOG_FILE_MAX_BYTES: int = 1024 * 1024  # 1MB max per log file
LOG_FILE_BACKUP_COUNT: int = 3  # Number of backup log files to keep
VALID_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# ==================== STATUS REPORT ====================

STATUS_FORMATS: tuple[str, ...] = ("table", "csv", "json")
STATUS_PREFERRED_COLUMNS: tuple[str, ...] = (
    "lock_name",
    "holders",
    "oldest_holder_age_s",
    "newest_holder_age_s",
    "token_present",
    "token_pid",
    "stale_staging",
)


def _parse_env_numeric(value: str | None, cast: Callable[[str], Any]) -> Any | None:
    """Parse an environment value, returning None when invalid."""
    if value is None:
        return None
    try:
        parsed = cast(value)
    except (TypeError, ValueError):
        return None
    if isinstance(parsed, float) and not math.isfinite(parsed):
        return None
    return parsed


def effective_acquire_defaults(environ: dict[str, str] | None = None) -> dict[str, int]:
    """Return max-holders / max-wait defaults with env-var overrides applied.

    Values below -1 are rejected the same way the CLI rejects them, leaving
    the built-in default in place.
    """
    env = os.environ if environ is None else environ
    logger = logging.getLogger(__name__)
    cfg = {"max_holders": DEFAULT_MAX_HOLDERS, "max_wait": DEFAULT_MAX_WAIT}

    for key, env_name in (("max_holders", MAX_HOLDERS_ENV), ("max_wait", MAX_WAIT_ENV)):
        if env_name not in env:
            continue
        parsed = _parse_env_numeric(env.get(env_name), int)
        if parsed is not None and parsed >= UNBOUNDED:
            cfg[key] = parsed
        else:
            logger.warning(f"Ignoring invalid {env_name}={env.get(env_name)!r}; using default {cfg[key]}")

    return cfg
