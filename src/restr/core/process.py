"""Per-file processor — count matches, then rewrite line by line.

Both the count and the rewrite treat the search string as a literal byte
sequence and work one line at a time (a line is everything up to and
including ``\\n``, or up to EOF for a final unterminated line).  A match
that spans a line boundary is never found, so dry-run counts always equal
the number of replacements a real run performs.
"""

from __future__ import annotations

import hashlib
import logging
import os
import re
import shutil
from dataclasses import dataclass
from pathlib import Path

_logger = logging.getLogger(__name__)

# Temporary files are hidden siblings of their target, e.g. ``.notes.txt.restr-tmp``.
# Names that would exceed NAME_MAX fall back to ``.restr-<digest>.restr-tmp``.
TEMP_SUFFIX = ".restr-tmp"
NAME_MAX = 255
_HASHED_TEMP = re.compile(r"^\.restr-[0-9a-f]{16}" + re.escape(TEMP_SUFFIX) + r"$")

NEWLINE = os.linesep.encode("ascii")


@dataclass(frozen=True)
class FileOutcome:
    """What happened to one file."""

    path: Path
    matches: int = 0
    replaced: bool = False
    error: OSError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def temp_path_for(path: Path) -> Path:
    """Deterministic temporary sibling for *path*, always within NAME_MAX."""
    name = f".{path.name}{TEMP_SUFFIX}"
    if len(os.fsencode(name)) > NAME_MAX:
        digest = hashlib.sha256(os.fsencode(path.name)).hexdigest()[:16]
        name = f".restr-{digest}{TEMP_SUFFIX}"
    return path.with_name(name)


def is_temp_artifact(path: Path) -> bool:
    """True only for a temporary file this module could have created.

    A plain ``notes.restr-tmp`` is an ordinary file; ``.notes.restr-tmp`` is
    an artifact only while its target ``notes`` exists beside it.
    """
    name = path.name
    if not (name.startswith(".") and name.endswith(TEMP_SUFFIX)):
        return False
    if _HASHED_TEMP.match(name):
        return True
    target = name[1 : -len(TEMP_SUFFIX)]
    return bool(target) and path.with_name(target).exists()


def _split_terminator(raw: bytes) -> tuple[bytes, bool]:
    if raw.endswith(b"\n"):
        return raw[:-1], True
    return raw, False


def count_matches(path: Path, search: bytes) -> int:
    """Count non-overlapping occurrences of *search* in *path*, line by line."""
    total = 0
    with open(path, "rb") as fh:
        for raw in fh:
            content, _ = _split_terminator(raw)
            total += content.count(search)
    return total


def replace_in_file(
    path: Path,
    search: bytes,
    replace: bytes,
    *,
    newline: bytes = NEWLINE,
    verbose: bool = False,
) -> int:
    """Rewrite *path* with every occurrence of *search* replaced.

    Each terminated line is written back with *newline* (the running
    platform's convention by default); an unterminated final line stays
    unterminated.  The rewrite goes to a temporary sibling which is then
    renamed over the original, so the original is untouched unless the
    rename happens.  A temporary file that was created is removed on any
    failure.

    Returns the number of replacements made.
    """
    tmp = temp_path_for(path)
    replaced = 0
    created = False
    try:
        with open(path, "rb") as src, open(tmp, "wb") as dst:
            created = True
            for raw in src:
                content, terminated = _split_terminator(raw)
                replaced += (len(content) - len(content.replace(search, b""))) // len(search)
                dst.write(content.replace(search, replace))
                if terminated:
                    dst.write(newline)
            dst.flush()
        shutil.copymode(path, tmp)
        os.replace(tmp, path)
    except OSError:
        if created:
            try:
                tmp.unlink()
            except FileNotFoundError:
                pass
            except OSError as cleanup_exc:
                if verbose:
                    _logger.warning(
                        "could not remove temporary file %s: %s", tmp, cleanup_exc
                    )
        raise
    return replaced


def process_file(
    path: Path,
    search: bytes,
    replace: bytes,
    *,
    dry_run: bool = False,
    verbose: bool = False,
) -> FileOutcome:
    """Count, then (unless *dry_run*) replace, every match in *path*.

    I/O failures are returned in ``FileOutcome.error`` rather than raised.
    """
    try:
        matches = count_matches(path, search)
    except OSError as exc:
        return FileOutcome(path=path, error=exc)

    if matches == 0:
        return FileOutcome(path=path)

    if verbose:
        _logger.info("found %4d match(es): %s", matches, path)

    if dry_run:
        _logger.info("[dry-run] would replace %d occurrence(s): %s", matches, path)
        return FileOutcome(path=path, matches=matches)

    try:
        replaced = replace_in_file(path, search, replace, verbose=verbose)
    except OSError as exc:
        return FileOutcome(path=path, error=exc)

    _logger.info("replaced %d occurrence(s): %s", replaced, path)
    return FileOutcome(path=path, matches=replaced, replaced=True)
