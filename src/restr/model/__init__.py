"""Enums shared across the walker, classifier and processor."""

from __future__ import annotations

from enum import Enum


class FileType(str, Enum):
    """Per-file classification, derived at discovery time and never persisted."""

    TEXT = "text"
    BINARY = "binary"
    UNKNOWN = "unknown"
