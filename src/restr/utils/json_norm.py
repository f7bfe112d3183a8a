"""Canonical JSON serialization for CLI output.

Guarantees:
  - Stable key ordering (``sort_keys=True``)
  - Trailing newline at EOF
  - ``Path`` objects → POSIX strings
  - Dataclasses → dicts (via ``dataclasses.asdict``)
"""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import PurePath
from typing import Any, Mapping


def to_builtin(obj: Any) -> Any:
    """Convert paths, dataclasses and containers into JSON-safe builtins.

    Raises ``TypeError`` for anything else that JSON cannot represent.
    """
    if obj is None or isinstance(obj, (str, int, bool, float)):
        return obj
    if isinstance(obj, PurePath):
        return obj.as_posix()
    if is_dataclass(obj) and not isinstance(obj, type):
        return to_builtin(asdict(obj))
    if isinstance(obj, Mapping):
        return {str(k): to_builtin(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_builtin(v) for v in obj]
    raise TypeError(f"not JSON serializable: {type(obj).__name__}")


def stable_json_dumps(obj: Any, *, indent: int | None = 2) -> str:
    """Serialize *obj* with sorted keys and a trailing newline."""
    return json.dumps(to_builtin(obj), indent=indent, sort_keys=True, ensure_ascii=False) + "\n"
