"""ReplaceResult — run-wide aggregate counters shared by all workers."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any

from restr.utils.json_norm import to_builtin


@dataclass(frozen=True)
class ResultSummary:
    """Point-in-time copy of the five counters, taken after the pool joins."""

    files_found: int = 0
    files_processed: int = 0
    files_matched: int = 0
    matches: int = 0
    errors: int = 0


class ReplaceResult:
    """Thread-safe aggregate exposing only ``add_*`` operations.

    Every counter is incremented independently under one lock; no counter
    is ever updated based on another counter's value.  Read the totals with
    :meth:`snapshot` once all workers have returned.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._files_found = 0
        self._files_processed = 0
        self._files_matched = 0
        self._matches = 0
        self._errors = 0

    def add_found(self, n: int = 1) -> None:
        with self._lock:
            self._files_found += n

    def add_processed(self, n: int = 1) -> None:
        with self._lock:
            self._files_processed += n

    def add_matched_file(self, n: int = 1) -> None:
        with self._lock:
            self._files_matched += n

    def add_matches(self, n: int) -> None:
        with self._lock:
            self._matches += n

    def add_error(self, n: int = 1) -> None:
        with self._lock:
            self._errors += n

    def snapshot(self) -> ResultSummary:
        with self._lock:
            return ResultSummary(
                files_found=self._files_found,
                files_processed=self._files_processed,
                files_matched=self._files_matched,
                matches=self._matches,
                errors=self._errors,
            )

    def __repr__(self) -> str:
        s = self.snapshot()
        return (
            f"ReplaceResult(found={s.files_found}, processed={s.files_processed}, "
            f"matched={s.files_matched}, matches={s.matches}, errors={s.errors})"
        )


def summary_document(
    summary: ResultSummary,
    *,
    root: str | PurePath,
    search: str,
    replace: str,
    workers: int,
    dry_run: bool,
    tool_version: str,
) -> dict[str, Any]:
    """Produce the summary JSON matching ``replace_summary.schema.json``."""
    doc = {
        "schema_version": "replace_summary_v1",
        "run": {
            "tool_version": tool_version,
            "root": root,
            "search": search,
            "replace": replace,
            "workers": workers,
            "dry_run": dry_run,
        },
        "counts": summary,
    }
    return to_builtin(doc)
