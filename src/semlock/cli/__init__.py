"""CLI module - Command-line interface components.

The entry point lives in ``semlock.cli.main``; it is not re-exported here
so that the submodule name stays importable and patchable.
"""

from semlock.cli.parser import build_parser, parse_arguments

__all__ = [
    "build_parser",
    "parse_arguments",
]
