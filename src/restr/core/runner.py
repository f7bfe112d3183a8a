"""Runner — one producer walking the tree, N workers draining a bounded queue."""

from __future__ import annotations

import logging
import queue
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from restr.core.config import ReplaceConfig
from restr.core.discover import check_root, iter_candidate_files
from restr.core.hidden import HiddenPredicate
from restr.core.process import process_file
from restr.model.result import ReplaceResult

_logger = logging.getLogger(__name__)

# Queue sentinel; one is pushed per worker once traversal finishes.
_CLOSED = None


def _worker(
    worker_id: int,
    work: queue.Queue[Path | None],
    config: ReplaceConfig,
    result: ReplaceResult,
) -> None:
    """Drain *work* until the close sentinel arrives."""
    search = config.search_bytes
    replace = config.replace_bytes
    while True:
        path = work.get()
        if path is _CLOSED:
            return
        result.add_processed()
        try:
            outcome = process_file(
                path,
                search,
                replace,
                dry_run=config.dry_run,
                verbose=config.verbose,
            )
        except Exception:
            result.add_error()
            if config.verbose:
                _logger.exception("worker %d: unexpected failure on %s", worker_id, path)
            continue

        if not outcome.ok:
            result.add_error()
            if config.verbose:
                _logger.warning(
                    "worker %d: error processing %s: %s", worker_id, path, outcome.error
                )
            continue
        if outcome.matches:
            result.add_matched_file()
            result.add_matches(outcome.matches)


def run_replace(
    config: ReplaceConfig,
    *,
    hidden: HiddenPredicate | None = None,
) -> ReplaceResult:
    """Walk ``config.root`` and search/replace every candidate file.

    Returns only after the queue has been closed and every worker has
    returned.  Raises ``FileNotFoundError`` / ``NotADirectoryError`` before
    any worker starts when the root cannot be walked.
    """
    check_root(config.root)

    result = ReplaceResult()
    work: queue.Queue[Path | None] = queue.Queue(maxsize=config.queue_size)

    _logger.debug(
        "starting %d worker(s) on %s (queue size %d)",
        config.workers,
        config.root,
        config.queue_size,
    )
    with ThreadPoolExecutor(
        max_workers=config.workers, thread_name_prefix="restr-worker"
    ) as pool:
        futures = [
            pool.submit(_worker, i, work, config, result)
            for i in range(config.workers)
        ]
        try:
            for path in iter_candidate_files(
                config.root, result, hidden=hidden, verbose=config.verbose
            ):
                # Blocks while the queue is full.
                work.put(path)
        finally:
            for _ in futures:
                work.put(_CLOSED)
        for future in futures:
            future.result()

    return result
