"""Hidden-entry predicates, selected once at startup by runtime platform.

POSIX:   hidden iff the base name starts with ``.``
Windows: hidden iff ``FILE_ATTRIBUTE_HIDDEN`` is set on the entry

The ``.`` and ``..`` markers are never hidden on either platform.
"""

from __future__ import annotations

import os
import stat
import sys
from typing import Protocol

_SELF_AND_PARENT = frozenset({".", ".."})


class HiddenPredicate(Protocol):
    """Decides whether a walked entry (file or directory) is hidden."""

    name: str

    def is_hidden(self, path: str, st: os.stat_result) -> bool: ...


class PosixHiddenPredicate:
    """Dot-file convention."""

    name: str = "posix"

    def is_hidden(self, path: str, st: os.stat_result) -> bool:
        base = os.path.basename(os.path.normpath(path))
        if base in _SELF_AND_PARENT:
            return False
        return base.startswith(".")


class WindowsHiddenPredicate:
    """Native hidden-attribute bit, read from the entry's ``lstat`` result."""

    name: str = "windows"

    def is_hidden(self, path: str, st: os.stat_result) -> bool:
        base = os.path.basename(os.path.normpath(path))
        if base in _SELF_AND_PARENT:
            return False
        attributes = getattr(st, "st_file_attributes", None)
        if attributes is None:
            # Stat results that lack attributes come from a foreign stat call;
            # re-stat so the bit is read from the filesystem itself.
            attributes = getattr(os.lstat(path), "st_file_attributes", 0)
        return bool(attributes & stat.FILE_ATTRIBUTE_HIDDEN)


def default_hidden_predicate(platform: str | None = None) -> HiddenPredicate:
    """Return the predicate for *platform* (default: the running interpreter's)."""
    platform = sys.platform if platform is None else platform
    if platform == "win32":
        return WindowsHiddenPredicate()
    return PosixHiddenPredicate()
