"""Logging helpers for semlock.

Standard output carries the lock-id protocol, so every handler installed
here writes to stderr or to a file. Several semlock processes may append to
one log file; JSON output keeps each record on a single line for them.
"""

import atexit
import contextlib
import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path

from semlock.core.constants import LOG_FILE_BACKUP_COUNT, LOG_FILE_MAX_BYTES, VALID_LOG_LEVELS

TEXT_LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(process)d] %(name)s - %(message)s"

# Attributes every LogRecord carries; anything else arrived through `extra`
_STANDARD_RECORD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

_shutdown_registered = False


class JSONFormatter(logging.Formatter):
    """Render a record as one JSON object, including ``extra`` context such as ``lock_name``."""

    def format(self, record: logging.LogRecord) -> str:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            message = f"{record.msg} [log-message-format-error]"

        entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": message,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "parent_process": os.getppid(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_"):
                entry.setdefault(key, value)

        return json.dumps(entry, default=str)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Adapter whose fixed context is merged under any per-call ``extra``."""

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        kwargs["extra"] = {**self.extra, **(kwargs.get("extra") or {})}
        return msg, kwargs


def with_log_context(logger, **context):
    """Return ``logger`` wrapped so every record carries ``context``.

    ``None`` values are dropped. Wrapping an adapter extends its context
    instead of nesting adapters. Objects that are not loggers (test doubles)
    come back unchanged.
    """
    if isinstance(logger, logging.LoggerAdapter):
        base, merged = logger.logger, dict(logger.extra or {})
    elif isinstance(logger, logging.Logger):
        base, merged = logger, {}
    else:
        return logger

    merged.update({k: v for k, v in context.items() if v is not None})
    return ContextLoggerAdapter(base, merged)


def flush_logging_handlers(logger: logging.Logger | logging.LoggerAdapter | None = None) -> None:
    """Flush the handlers a record from ``logger`` would reach (root handlers by default)."""
    while isinstance(logger, logging.LoggerAdapter):
        logger = logger.logger

    handlers: list[logging.Handler] = []
    current = logger if isinstance(logger, logging.Logger) else None
    while current is not None:
        handlers.extend(current.handlers)
        current = current.parent if current.propagate else None
    if not handlers:
        handlers = list(logging.root.handlers)

    for handler in dict.fromkeys(handlers):
        with contextlib.suppress(Exception):
            handler.flush()


def _resolve_level(log_level: str | None) -> int:
    name = (log_level or os.environ.get("LOG_LEVEL") or "WARNING").upper()
    if name not in VALID_LOG_LEVELS:
        print(f"Warning: Invalid log level '{name}', using WARNING", file=sys.stderr)
        name = "WARNING"
    return getattr(logging, name)


def setup_logging(
    log_level: str | None = None,
    log_format: str = "text",
    log_file: str | Path | None = None,
    file_max_bytes: int = LOG_FILE_MAX_BYTES,
    file_backup_count: int = LOG_FILE_BACKUP_COUNT,
) -> logging.Logger:
    """Route semlock logging to stderr and, optionally, a rotating log file.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL; falls back to
            ``$LOG_LEVEL`` and then WARNING
        log_format: "text" or "json"
        log_file: Optional log file path; its parent is created if missing
        file_max_bytes: Rotation size of the log file
        file_backup_count: Rotated files kept

    Returns:
        The ``semlock`` package logger
    """
    global _shutdown_registered
    if not _shutdown_registered:
        atexit.register(logging.shutdown)
        _shutdown_registered = True

    level = _resolve_level(log_level)

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
        handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    log_path = Path(log_file) if log_file is not None else None
    if log_path is not None:
        try:
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(RotatingFileHandler(log_path, maxBytes=file_max_bytes, backupCount=file_backup_count))
        except OSError as e:
            print(f"Warning: Cannot open log file {log_path}: {e}. Logging to stderr only.", file=sys.stderr)
            log_path = None

    formatter = JSONFormatter() if log_format.lower() == "json" else logging.Formatter(TEXT_LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)
        logging.root.addHandler(handler)
    logging.root.setLevel(level)

    logger = logging.getLogger("semlock")
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    if log_path is not None:
        logger.info(f"Logging to stderr and {log_path}")
    return logger
