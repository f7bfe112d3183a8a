"""Replace configuration dataclass."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_WORKERS = 4
DEFAULT_QUEUE_SIZE = 1000

# Environment overrides for the CLI defaults.  Explicit flags always win.
WORKERS_ENV = "RESTR_WORKERS"
QUEUE_SIZE_ENV = "RESTR_QUEUE_SIZE"


class ConfigError(ValueError):
    """Invalid configuration; always fatal, raised before any file is touched."""


def _is_positive_int(value: object) -> bool:
    # bool is an int subclass; True must not pass as one worker.
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


@dataclass(frozen=True)
class ReplaceConfig:
    """Immutable replace configuration.

    ``root`` is resolved to an absolute path at construction and every
    field is validated once in ``__post_init__``.
    """

    root: Path
    search: str
    replace: str
    workers: int = DEFAULT_WORKERS
    dry_run: bool = False
    verbose: bool = False
    queue_size: int = DEFAULT_QUEUE_SIZE

    def __post_init__(self) -> None:
        if not self.search:
            raise ConfigError("search string must not be empty")
        if not self.replace:
            raise ConfigError("replacement string must not be empty")
        if not _is_positive_int(self.workers):
            raise ConfigError(f"worker count must be >= 1, got {self.workers!r}")
        if not _is_positive_int(self.queue_size):
            raise ConfigError(f"queue size must be >= 1, got {self.queue_size!r}")
        try:
            root = Path(self.root).resolve()
        except (OSError, RuntimeError) as exc:
            raise ConfigError(f"cannot resolve root directory {self.root!s}: {exc}") from exc
        object.__setattr__(self, "root", root)

    @property
    def search_bytes(self) -> bytes:
        return self.search.encode("utf-8")

    @property
    def replace_bytes(self) -> bytes:
        return self.replace.encode("utf-8")


def _int_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ConfigError(f"{name} must be >= 1, got {value}")
    return value


def default_workers() -> int:
    """Worker count used when none is given explicitly."""
    return _int_from_env(WORKERS_ENV, DEFAULT_WORKERS)


def default_queue_size() -> int:
    return _int_from_env(QUEUE_SIZE_ENV, DEFAULT_QUEUE_SIZE)
