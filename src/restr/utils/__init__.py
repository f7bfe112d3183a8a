"""Shared utilities for restr."""

from restr.utils.exit_codes import ExitCode
from restr.utils.json_norm import stable_json_dumps

__all__ = [
    "ExitCode",
    "stable_json_dumps",
]
