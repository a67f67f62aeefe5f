"""CLI entrypoint."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

from semlock.cli.parser import parse_arguments
from semlock.core.colors import ConsoleColors
from semlock.core.config import SemLockConfig
from semlock.core.exceptions import AcquireInterrupted, ConfigurationError, InvalidLockNameError
from semlock.core.locks.guard import SignalTrap
from semlock.core.locks.manager import SemaphoreLock
from semlock.core.locks.naming import validate_lock_name
from semlock.core.logging import flush_logging_handlers, setup_logging
from semlock.core.namespace import candidate_lock_dir, resolve_lock_dir
from semlock.output.status import collect_lock_status, write_status_output
from semlock.pipeline.batch import BatchAcquirer


def _exit_error(msg: str) -> NoReturn:
    """Print a coloured error message to stderr and exit with code 1."""
    print(ConsoleColors.error(f"ERROR: {msg}"), file=sys.stderr)
    sys.exit(1)


def _has_valid_name(lock_names: list[str]) -> bool:
    for lock_name in lock_names:
        try:
            validate_lock_name(lock_name)
        except InvalidLockNameError:
            continue
        return True
    return False


def _namespace_for(config: SemLockConfig, lock_names: list[str]) -> Path:
    """Resolve the namespace, creating it only if some name can be acquired."""
    if not _has_valid_name(lock_names):
        return candidate_lock_dir(config.lock_dir).absolute()
    return resolve_lock_dir(config.lock_dir)


def run_status(args: argparse.Namespace, config: SemLockConfig, logger: logging.Logger) -> int:
    """Print the namespace status report without creating anything. Returns the exit code."""
    for lock_name in args.lock_names:
        try:
            validate_lock_name(lock_name)
        except InvalidLockNameError as e:
            raise ConfigurationError(str(e), field="lock_names") from e

    lock_dir = candidate_lock_dir(config.lock_dir).absolute()
    if not lock_dir.is_dir():
        logger.debug(f"Lock namespace {lock_dir} does not exist yet")
    rows = collect_lock_status(lock_dir, args.lock_names or None)
    write_status_output(rows, args.format, sys.stdout)
    return 0


def run_acquire(args: argparse.Namespace, config: SemLockConfig, logger: logging.Logger) -> int:
    """Acquire every requested name. Returns the exit code."""
    lock_dir = _namespace_for(config, args.lock_names)

    with SignalTrap() as trap:
        lock = SemaphoreLock(
            lock_dir,
            max_holders=config.max_holders,
            wait=config.wait,
            trap=trap,
            logger=logger,
        )
        batch = BatchAcquirer(lock, quiet=config.quiet, logger=logger, trap=trap).acquire_all(args.lock_names)

    return batch.exit_code


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the script"""
    args = parse_arguments(argv)

    ConsoleColors.configure(no_color=getattr(args, "no_color", False))
    config = SemLockConfig.from_args(args)
    logger = setup_logging(
        log_level=config.log.level,
        log_format=config.log.format,
        log_file=config.log.file,
        file_max_bytes=config.log.file_max_bytes,
        file_backup_count=config.log.file_backup_count,
    )

    try:
        if args.status:
            exit_code = run_status(args, config, logger)
        else:
            exit_code = run_acquire(args, config, logger)
    except ConfigurationError as e:
        flush_logging_handlers(logger)
        _exit_error(str(e))
    except AcquireInterrupted as e:
        # Signal landed outside the batch's own bookkeeping; ids already printed stand
        logger.debug(f"Interrupted by signal {e.signum} outside a batch step")
        exit_code = e.exit_code

    flush_logging_handlers(logger)
    sys.exit(exit_code)
