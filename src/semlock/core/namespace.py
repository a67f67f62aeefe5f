"""Lock namespace resolution.

Precedence: explicit override, then ``$SEMLOCK_DIR``, then
``$XDG_RUNTIME_DIR/semlock``, then ``/tmp/semlock-<uid>``.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from semlock.core.constants import (
    FALLBACK_LOCK_DIR_TEMPLATE,
    LOCK_DIR_ENV,
    RUNTIME_DIR_ENV,
    RUNTIME_DIR_SUBPATH,
)
from semlock.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _current_uid() -> str:
    getuid = getattr(os, "getuid", None)
    if getuid is None:  # pragma: no cover - non-POSIX only
        return os.environ.get("USERNAME", "user")
    return str(getuid())


def candidate_lock_dir(override: str | os.PathLike | None = None, environ: Mapping[str, str] | None = None) -> Path:
    """Return the lock directory the precedence rules select, without touching disk."""
    env = os.environ if environ is None else environ

    if override:
        return Path(override).expanduser()
    if env.get(LOCK_DIR_ENV):
        return Path(env[LOCK_DIR_ENV]).expanduser()
    if env.get(RUNTIME_DIR_ENV):
        return Path(env[RUNTIME_DIR_ENV]) / RUNTIME_DIR_SUBPATH
    return Path(FALLBACK_LOCK_DIR_TEMPLATE.format(uid=_current_uid()))


def resolve_lock_dir(override: str | os.PathLike | None = None, environ: Mapping[str, str] | None = None) -> Path:
    """Resolve, create and verify the lock namespace directory.

    Args:
        override: Explicit directory (e.g. from ``--lock-dir``)
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        Absolute path of a writable directory

    Raises:
        ConfigurationError: If the directory cannot be created or written
    """
    lock_dir = candidate_lock_dir(override, environ).absolute()

    try:
        lock_dir.mkdir(parents=True, exist_ok=True)
    except PermissionError as e:
        raise ConfigurationError(
            f"Permission denied creating lock directory: {lock_dir}",
            field="lock_dir",
            details="Check that you have write permissions for the parent directory",
        ) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot create lock directory '{lock_dir}'", field="lock_dir", details=str(e)) from e

    if not lock_dir.is_dir():
        raise ConfigurationError(f"Lock directory is not a directory: {lock_dir}", field="lock_dir")
    if not os.access(lock_dir, os.W_OK | os.X_OK):
        raise ConfigurationError(f"Lock directory is not writable: {lock_dir}", field="lock_dir")

    logger.debug(f"Using lock namespace {lock_dir}")
    return lock_dir
