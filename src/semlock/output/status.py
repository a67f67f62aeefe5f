"""Read-only lock namespace status report.

Surfaces holder counts, holder ages and modify-token state per lock group.
Nothing here mutates the namespace; in particular stale modify tokens are
reported, never reclaimed.
"""

from __future__ import annotations

import json
import os
import time
from collections import Counter
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TextIO

import pandas as pd

from semlock.core.constants import STATUS_FORMATS, STATUS_PREFERRED_COLUMNS, STAGING_PREFIX
from semlock.core.locks.protocol import LockGroupPaths, read_token_pid


def _holder_mtimes(holders_dir: Path) -> list[float]:
    try:
        with os.scandir(holders_dir) as entries:
            return [
                entry.stat(follow_symlinks=False).st_mtime
                for entry in entries
                if entry.is_dir(follow_symlinks=False)
            ]
    except (FileNotFoundError, NotADirectoryError):
        return []


def _staging_counts(namespace: Path) -> Counter:
    """Count in-flight or abandoned staging trees per lock name."""
    counts: Counter = Counter()
    with os.scandir(namespace) as entries:
        for entry in entries:
            if not entry.name.startswith(STAGING_PREFIX) or not entry.is_dir(follow_symlinks=False):
                continue
            try:
                with os.scandir(entry.path) as staged:
                    for child in staged:
                        counts[child.name] += 1
            except OSError:
                # Owner finished and removed it while we looked.
                continue
    return counts


def collect_lock_status(
    namespace: Path,
    names: Iterable[str] | None = None,
    now: float | None = None,
) -> list[dict[str, Any]]:
    """Snapshot every lock group in ``namespace`` (or only ``names``).

    Requested names without a group are reported with zero holders. A
    namespace that does not exist yet has no groups.
    """
    now = time.time() if now is None else now
    wanted = set(names) if names else None
    staging: Counter = Counter()
    group_names: set[str] = set()

    if namespace.is_dir():
        staging = _staging_counts(namespace)
        with os.scandir(namespace) as entries:
            for entry in entries:
                if entry.name.startswith(STAGING_PREFIX) or not entry.is_dir(follow_symlinks=False):
                    continue
                group_names.add(entry.name)
    if wanted is not None:
        group_names = wanted

    rows: list[dict[str, Any]] = []
    for lock_name in sorted(group_names):
        paths = LockGroupPaths(namespace, lock_name)
        mtimes = _holder_mtimes(paths.holders)
        token_present = paths.token.exists()
        rows.append(
            {
                "lock_name": lock_name,
                "holders": len(mtimes),
                "oldest_holder_age_s": round(now - min(mtimes), 1) if mtimes else None,
                "newest_holder_age_s": round(now - max(mtimes), 1) if mtimes else None,
                "token_present": token_present,
                "token_pid": read_token_pid(paths.token) if token_present else None,
                "stale_staging": staging.get(lock_name, 0),
            }
        )
    return rows


def build_status_dataframe(rows: list[dict[str, Any]]) -> pd.DataFrame:
    """Build status dataframe with stable columns for empty/non-empty output."""
    if not rows:
        return pd.DataFrame(columns=list(STATUS_PREFERRED_COLUMNS))

    df = pd.DataFrame(rows)
    preferred_cols = [col for col in STATUS_PREFERRED_COLUMNS if col in df.columns]
    other_cols = [col for col in df.columns if col not in preferred_cols]
    return df[preferred_cols + other_cols]


def _write_table(rows: list[dict[str, Any]], stream: TextIO) -> None:
    if not rows:
        print("No lock groups found.", file=stream)
        return
    df = build_status_dataframe(rows)
    print(df.to_string(index=False, na_rep="-"), file=stream)


def _write_csv(rows: list[dict[str, Any]], stream: TextIO) -> None:
    build_status_dataframe(rows).to_csv(stream, index=False)


def _write_json(rows: list[dict[str, Any]], stream: TextIO) -> None:
    json.dump(rows, stream, indent=2, ensure_ascii=False)
    print(file=stream)


STATUS_WRITERS: dict[str, Callable[[list[dict[str, Any]], TextIO], None]] = {
    "table": _write_table,
    "csv": _write_csv,
    "json": _write_json,
}


def write_status_output(rows: list[dict[str, Any]], report_format: str, stream: TextIO) -> None:
    """Render status rows as a table, CSV or JSON."""
    report_format = report_format.lower()
    if report_format not in STATUS_FORMATS:
        raise ValueError(f"Unsupported status format: {report_format}")
    STATUS_WRITERS[report_format](rows, stream)
