"""CLI argument parsing for semlock."""

from __future__ import annotations

import argparse

from semlock.core.constants import (
    DEFAULT_POLL_INTERVAL,
    LOCK_DIR_ENV,
    MAX_HOLDERS_ENV,
    MAX_WAIT_ENV,
    STATUS_FORMATS,
    UNBOUNDED,
    VALID_LOG_LEVELS,
    effective_acquire_defaults,
)
from semlock.core.version import __version__


def _int_at_least(min_val: int):
    """Argparse type factory for an integer >= min_val."""

    def _type(value: str) -> int:
        try:
            i = int(value)
        except ValueError:
            raise argparse.ArgumentTypeError(f"must be an integer, got {value!r}") from None
        if i < min_val:
            raise argparse.ArgumentTypeError(f"must be >= {min_val}, got {i}")
        return i

    _type.__name__ = f"int[>={min_val}]"
    return _type


def _positive_float(value: str) -> float:
    try:
        f = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be a number, got {value!r}") from None
    if not f > 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {f}")
    return f


def build_parser() -> argparse.ArgumentParser:
    """Build the semlock argument parser."""
    defaults = effective_acquire_defaults()

    parser = argparse.ArgumentParser(
        prog="semlock",
        description="Acquire named, bounded shared locks coordinated through the filesystem",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Each admitted lock name prints one line on stdout: the lock id, an absolute
path that the release and touch operations take as input. Warnings go to
stderr. Exit status is 0 if at least one name was admitted, 1 otherwise.

Examples:
  # Exclusive-ish: at most two concurrent holders, wait up to 5 seconds
  semlock -n 2 -w 5 jobA

  # Several locks at once, unbounded holders
  semlock foo bar

  # Wait forever
  semlock -w -1 nightly-backup

  # Inspect a lock namespace
  semlock --status
  semlock --status jobA --format json

Environment:
  {LOCK_DIR_ENV}           lock directory when --lock-dir is not given
  XDG_RUNTIME_DIR       fallback parent directory (uses $XDG_RUNTIME_DIR/semlock)
  {MAX_HOLDERS_ENV}   default for --max-holders
  {MAX_WAIT_ENV}      default for --max-wait
  LOG_LEVEL             default for --log-level
""",
    )

    parser.add_argument("lock_names", nargs="*", metavar="NAME", help="Lock names to acquire (must not contain '/' or ':')")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}", help="Show program version and exit"
    )

    lock_group = parser.add_argument_group("Locking", "Options controlling admission")
    lock_group.add_argument(
        "-n",
        "--max-holders",
        type=_int_at_least(UNBOUNDED),
        default=defaults["max_holders"],
        help="Maximum concurrent holders per lock name; -1 is unbounded (default: %(default)s)",
    )
    lock_group.add_argument(
        "-d",
        "--lock-dir",
        default=None,
        help=f"Lock namespace directory (default: ${LOCK_DIR_ENV}, $XDG_RUNTIME_DIR/semlock, /tmp/semlock-<uid>)",
    )
    lock_group.add_argument(
        "-w",
        "--max-wait",
        type=_int_at_least(UNBOUNDED),
        default=defaults["max_wait"],
        help="Maximum seconds to wait per lock name; -1 waits forever (default: %(default)s)",
    )
    lock_group.add_argument(
        "--poll-interval",
        type=_positive_float,
        default=DEFAULT_POLL_INTERVAL,
        help="Seconds between admission attempts (default: %(default)s)",
    )

    status_group = parser.add_argument_group("Status", "Inspect a lock namespace without acquiring")
    status_group.add_argument(
        "--status", action="store_true", help="Print holder counts and token state for lock groups"
    )
    status_group.add_argument(
        "--format",
        choices=STATUS_FORMATS,
        default="table",
        help="Status report format (default: %(default)s)",
    )

    output_group = parser.add_argument_group("Output", "Diagnostics and logging")
    output_group.add_argument("-q", "--quiet", action="store_true", help="Hide the progress bar")
    output_group.add_argument("--no-color", action="store_true", help="Disable colored diagnostics")
    output_group.add_argument(
        "--log-level",
        type=str.upper,
        choices=VALID_LOG_LEVELS,
        default=None,
        help="Logging level (default: $LOG_LEVEL or WARNING)",
    )
    output_group.add_argument(
        "--log-format",
        choices=("text", "json"),
        default="text",
        help="Log output format (default: %(default)s)",
    )
    output_group.add_argument("--log-file", default=None, help="Also append logs to this rotating file")

    return parser


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments"""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.status and not args.lock_names:
        parser.error("at least one lock NAME is required")
    return args
