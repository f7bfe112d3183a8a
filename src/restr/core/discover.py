"""File discovery — walk the tree once and yield candidate text files.

For every entry below the root:
  - directory:   pruned with its whole subtree when hidden, else descended
  - non-regular: symlinks, devices, sockets, FIFOs are skipped silently
  - regular:     skipped when hidden or classified BINARY, else counted as
                 found and yielded

Per-entry failures are counted in the result and logged when verbose;
traversal always continues with the rest of the tree.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Iterator

from restr.core.classify import classify
from restr.core.hidden import HiddenPredicate, default_hidden_predicate
from restr.core.process import is_temp_artifact
from restr.model import FileType
from restr.model.result import ReplaceResult

_logger = logging.getLogger(__name__)


def check_root(root: Path) -> None:
    """Fail fast when *root* cannot be walked at all."""
    if not root.exists():
        raise FileNotFoundError(f"root does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"root is not a directory: {root}")


def _hidden(predicate: HiddenPredicate, path: str, st: os.stat_result, *, verbose: bool) -> bool:
    try:
        return predicate.is_hidden(path, st)
    except OSError as exc:
        if verbose:
            _logger.warning("cannot check hidden attribute of %s: %s", path, exc)
        return False


def _file_type(path: str, *, verbose: bool) -> FileType:
    try:
        return classify(path)
    except OSError as exc:
        if verbose:
            _logger.warning("cannot classify %s: %s", path, exc)
        return FileType.UNKNOWN


def iter_candidate_files(
    root: Path,
    result: ReplaceResult,
    *,
    hidden: HiddenPredicate | None = None,
    verbose: bool = False,
) -> Iterator[Path]:
    """Yield every candidate file under *root*.

    The root itself is never treated as hidden.  Files whose type cannot be
    determined are yielded; the processor reports the failure if they
    cannot be read either.
    """
    check_root(root)
    predicate = hidden or default_hidden_predicate()

    def _on_error(exc: OSError) -> None:
        result.add_error()
        if verbose:
            _logger.warning("cannot access %s: %s", exc.filename, exc.strerror or exc)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
        kept: list[str] = []
        for name in sorted(dirnames):
            full = os.path.join(dirpath, name)
            try:
                st = os.lstat(full)
            except OSError as exc:
                _on_error(exc)
                continue
            if not stat.S_ISDIR(st.st_mode):
                continue
            if _hidden(predicate, full, st, verbose=verbose):
                if verbose:
                    _logger.info("skipping hidden directory: %s", full)
                continue
            kept.append(name)
        # Prune in place so os.walk never descends into skipped directories.
        dirnames[:] = kept

        for name in sorted(filenames):
            full = os.path.join(dirpath, name)
            try:
                st = os.lstat(full)
            except OSError as exc:
                _on_error(exc)
                continue
            if not stat.S_ISREG(st.st_mode):
                continue
            if is_temp_artifact(Path(full)):
                continue
            if _hidden(predicate, full, st, verbose=verbose):
                if verbose:
                    _logger.info("skipping hidden file: %s", full)
                continue
            if _file_type(full, verbose=verbose) is FileType.BINARY:
                if verbose:
                    _logger.info("skipping binary file: %s", full)
                continue
            result.add_found()
            yield Path(full)
