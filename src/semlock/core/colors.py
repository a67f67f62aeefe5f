"""Console colors for semlock diagnostics.

Diagnostics go to stderr, so color support is detected on stderr rather
than stdout. Standard output carries lock ids and is never colored.
"""

import os
import sys


class ConsoleColors:
    """ANSI coloring for the single-line ``ERROR:``/``WARNING:`` diagnostics.

    Off when stderr is not a TTY, when ``NO_COLOR`` is set, or after
    ``configure(no_color=True)``.
    """

    RED = '\033[91m'
    YELLOW = '\033[93m'
    RESET = '\033[0m'

    _enabled = sys.stderr.isatty() and not os.environ.get('NO_COLOR')

    @classmethod
    def configure(cls, no_color: bool = False) -> None:
        """Apply the --no-color switch for all call sites."""
        if no_color:
            cls._enabled = False

    @classmethod
    def _wrap(cls, code: str, text: str) -> str:
        return f"{code}{text}{cls.RESET}" if cls._enabled else text

    @classmethod
    def error(cls, text: str) -> str:
        return cls._wrap(cls.RED, text)

    @classmethod
    def warning(cls, text: str) -> str:
        return cls._wrap(cls.YELLOW, text)


def _format_error_msg(operation: str, lock_name: str | None = None, error: Exception | None = None) -> str:
    """
    Format a per-name failure as one greppable stderr line.

    Args:
        operation: What failed (e.g., "acquiring lock")
        lock_name: Optional lock name context
        error: Optional exception to include in the message

    Returns:
        Formatted error message string
    """
    msg = f"Error {operation}"
    if lock_name:
        msg += f" '{lock_name}'"
    if error:
        msg += f": {error!s}"
    return " ".join(msg.splitlines())
