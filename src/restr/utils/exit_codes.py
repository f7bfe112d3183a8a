"""Centralized exit-code contract for the CLI.

Code  Meaning
----  -------
  0   Success — the run finished (per-file errors are reported, not fatal)
  2   Error — invalid configuration, missing root, fatal traversal failure
"""

from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 2
