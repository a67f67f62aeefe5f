"""Output module - status report writers."""

from semlock.output.status import (
    STATUS_WRITERS,
    build_status_dataframe,
    collect_lock_status,
    write_status_output,
)

__all__ = [
    "STATUS_WRITERS",
    "build_status_dataframe",
    "collect_lock_status",
    "write_status_output",
]
