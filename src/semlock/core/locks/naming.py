"""Lock-name validation and collision-free holder ids."""

from __future__ import annotations

import os
import threading
import time

from semlock.core.constants import (
    CONTROL_CHAR_PATTERN,
    FORBIDDEN_NAME_CHARS,
    MODIFY_TOKEN_NAME,
    RESERVED_PATH_ALIASES,
    STAGING_NAME_PATTERN,
)
from semlock.core.exceptions import InvalidLockNameError

_stamp_lock = threading.Lock()
_last_stamp = 0


def validate_lock_name(name: str) -> str:
    """Return ``name`` unchanged if it is usable as a lock name.

    Raises:
        InvalidLockNameError: For empty, reserved or malformed names
    """
    if not isinstance(name, str) or not name:
        raise InvalidLockNameError(str(name), "lock name must be a non-empty string")

    for char in FORBIDDEN_NAME_CHARS:
        if char in name:
            shown = "NUL" if char == "\0" else f"'{char}'"
            raise InvalidLockNameError(name, f"lock name must not contain {shown}")

    control = CONTROL_CHAR_PATTERN.search(name)
    if control:
        raise InvalidLockNameError(name, f"lock name must not contain control character {control.group()!r}")

    if name in RESERVED_PATH_ALIASES:
        raise InvalidLockNameError(name, "lock name must not be a path alias")
    if name == MODIFY_TOKEN_NAME:
        raise InvalidLockNameError(name, f"'{MODIFY_TOKEN_NAME}' is reserved for the modify token")
    if STAGING_NAME_PATTERN.match(name):
        raise InvalidLockNameError(name, "names beginning with '.stage.' are reserved for staging")

    return name


def _next_stamp() -> int:
    """Nanosecond timestamp, strictly increasing within this process."""
    global _last_stamp
    with _stamp_lock:
        stamp = max(time.time_ns(), _last_stamp + 1)
        _last_stamp = stamp
        return stamp


def new_holder_id() -> str:
    """Build a holder id of the form ``<timestamp_ns>.<pid>.<ppid>``."""
    return f"{_next_stamp()}.{os.getpid()}.{os.getppid()}"
