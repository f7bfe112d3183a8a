"""
restr.api
=========

Programmatic entrypoint for using restr without the CLI.

Goals:
  - No argparse / CLI dependencies
  - Stable, JSON-friendly output that matches the summary schema

Usage::

    from restr.api import replace_tree

    summary = replace_tree(".", "old_name", "new_name", dry_run=True)
    summary["counts"]["matches"]
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from restr.contracts.load import validate_instance
from restr.core.config import DEFAULT_WORKERS, ReplaceConfig
from restr.core.hidden import HiddenPredicate
from restr.core.runner import run_replace
from restr.model.result import summary_document


def replace_tree(
    root: str | Path,
    search: str,
    replace: str,
    *,
    workers: int = DEFAULT_WORKERS,
    dry_run: bool = False,
    verbose: bool = False,
    hidden: HiddenPredicate | None = None,
) -> dict[str, Any]:
    """Search/replace under *root* and return the validated summary dict.

    Raises
    ------
    restr.core.config.ConfigError
        On an empty search/replacement string or a non-positive worker count.
    FileNotFoundError / NotADirectoryError
        When *root* cannot be walked.
    """
    from restr import __version__

    config = ReplaceConfig(
        root=Path(root),
        search=search,
        replace=replace,
        workers=workers,
        dry_run=dry_run,
        verbose=verbose,
    )
    result = run_replace(config, hidden=hidden)
    doc = summary_document(
        result.snapshot(),
        root=config.root,
        search=config.search,
        replace=config.replace,
        workers=config.workers,
        dry_run=config.dry_run,
        tool_version=__version__,
    )
    validate_instance(doc, "replace_summary.schema.json")
    return doc
