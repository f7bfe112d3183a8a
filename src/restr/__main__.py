"""CLI entry-point for restr.

Usage:
    python -m restr [PATH] --from OLD --to NEW
    python -m restr [PATH] --from OLD --to NEW --dry-run
    python -m restr --dir PATH --from OLD --to NEW --workers 8 --verbose
    python -m restr [PATH] --from OLD --to NEW --json
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from restr import __version__
from restr.contracts.load import validate_instance
from restr.core.config import (
    ConfigError,
    ReplaceConfig,
    default_queue_size,
    default_workers,
)
from restr.core.runner import run_replace
from restr.model.result import ResultSummary, summary_document
from restr.utils.exit_codes import ExitCode
from restr.utils.json_norm import stable_json_dumps


# ── argument parsing ────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="restr",
        description=(
            "Replace a literal string in every text file under a directory, "
            "skipping hidden entries and binary files."
        ),
    )
    root = p.add_mutually_exclusive_group()
    root.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=None,
        help="Root directory to scan (default: current directory).",
    )
    root.add_argument(
        "-d",
        "--dir",
        dest="dir",
        type=Path,
        default=None,
        help="Root directory to scan; alternative to the positional PATH.",
    )
    p.add_argument(
        "-f",
        "--from",
        dest="search",
        default="",
        help="Literal string to search for (required).",
    )
    p.add_argument(
        "-t",
        "--to",
        dest="replace",
        default="",
        help="Replacement string (required).",
    )
    p.add_argument(
        "-w",
        "--workers",
        type=int,
        default=None,
        help="Number of concurrent workers (default: $RESTR_WORKERS or 4).",
    )
    p.add_argument(
        "-n",
        "--dry-run",
        "-T",
        "--test",
        dest="dry_run",
        action="store_true",
        default=False,
        help="Report matches without modifying any file.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Log skipped entries and per-file errors.",
    )
    p.add_argument(
        "--json",
        dest="json_out",
        action="store_true",
        default=False,
        help="Print the run summary as JSON to stdout.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return p


# ── output helpers ──────────────────────────────────────────────────


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        stream=sys.stderr,
    )


def _print_banner(config: ReplaceConfig) -> None:
    print("Starting string replacement:")
    print(f"  root        : {config.root}")
    print(f"  search      : '{config.search}'")
    print(f"  replacement : '{config.replace}'")
    print(f"  workers     : {config.workers}")
    print(f"  dry run     : {config.dry_run}")
    print()


def _print_summary(summary: ResultSummary, *, dry_run: bool) -> None:
    print()
    print("Result:")
    print(f"  files found     : {summary.files_found}")
    print(f"  files processed : {summary.files_processed}")
    print(f"  files matched   : {summary.files_matched}")
    print(f"  matches         : {summary.matches}")
    print(f"  errors          : {summary.errors}")
    if dry_run:
        print()
        print("Note: dry run, no file was modified.")


# ── entry point ─────────────────────────────────────────────────────


def _build_config(args: argparse.Namespace) -> ReplaceConfig:
    root = args.dir or args.path or Path(".")
    workers = args.workers if args.workers is not None else default_workers()
    return ReplaceConfig(
        root=root,
        search=args.search,
        replace=args.replace,
        workers=workers,
        dry_run=args.dry_run,
        verbose=args.verbose,
        queue_size=default_queue_size(),
    )


def main(argv: list[str] | None = None) -> int:
    """Entry-point — returns an exit code (0 = run completed, 2 = fatal error)."""
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = _build_config(args)
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return ExitCode.ERROR

    if not args.json_out:
        _print_banner(config)

    try:
        result = run_replace(config)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return ExitCode.ERROR

    summary = result.snapshot()

    if args.json_out:
        doc = summary_document(
            summary,
            root=config.root,
            search=config.search,
            replace=config.replace,
            workers=config.workers,
            dry_run=config.dry_run,
            tool_version=__version__,
        )
        validate_instance(doc, "replace_summary.schema.json")
        sys.stdout.write(stable_json_dumps(doc))
    else:
        _print_summary(summary, dry_run=config.dry_run)

    return ExitCode.SUCCESS


if __name__ == "__main__":
    raise SystemExit(main())
