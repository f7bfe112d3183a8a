"""File-type classifier — decides whether a file is text or binary.

Decision order:
  1. extension on the binary deny-list  → BINARY (content never read)
  2. extension on the text allow-list   → TEXT   (content never read)
  3. content heuristic on the first 4 KiB:
       - empty sample                   → TEXT
       - any NUL byte                   → BINARY
       - short sample or valid UTF-8    → TEXT if printable ratio > 0.85
       - otherwise                      → BINARY
"""

from __future__ import annotations

import os

from restr.model import FileType

SAMPLE_SIZE = 4096
PRINTABLE_THRESHOLD = 0.85

BINARY_EXTENSIONS: frozenset[str] = frozenset({
    # Executables and shared libraries
    ".exe", ".dll", ".so", ".dylib",
    # Archives
    ".zip", ".rar", ".tar", ".gz", ".7z", ".bz2",
    # Images
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".ico",
    # Audio / video
    ".mp3", ".mp4", ".avi", ".mkv", ".mov", ".wav",
    # Object files and static libraries
    ".o", ".obj", ".lib", ".a",
    # Databases
    ".db", ".sqlite", ".mdb",
    # Documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    # Disk images
    ".iso", ".img", ".dmg",
    # Fonts
    ".ttf", ".otf", ".woff", ".woff2",
    # Packaged archives
    ".jar", ".war", ".ear",
    # Opaque data
    ".bin", ".dat",
})

TEXT_EXTENSIONS: frozenset[str] = frozenset({
    # Config formats
    ".yaml", ".toml", ".json",
    # Shell / make
    ".sh", ".mk",
    # Source code
    ".c", ".cpp", ".h", ".vala", ".py", ".go", ".rs", ".ts",
})

# Printable ASCII plus tab, LF and CR.
_PRINTABLE = frozenset(range(32, 127)) | {9, 10, 13}


def _extension(path: str | os.PathLike[str]) -> str:
    return os.path.splitext(os.fspath(path))[1].lower()


def has_binary_extension(path: str | os.PathLike[str]) -> bool:
    return _extension(path) in BINARY_EXTENSIONS


def has_text_extension(path: str | os.PathLike[str]) -> bool:
    return _extension(path) in TEXT_EXTENSIONS


def printable_ratio(data: bytes) -> float:
    """Fraction of *data* that is printable ASCII, tab, LF or CR (1.0 when empty)."""
    if not data:
        return 1.0
    printable = sum(1 for b in data if b in _PRINTABLE)
    return printable / len(data)


def _is_valid_utf8(data: bytes) -> bool:
    try:
        data.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def classify_sample(sample: bytes) -> FileType:
    """Classify a content sample read from the start of a file."""
    if not sample:
        return FileType.TEXT
    if b"\x00" in sample:
        return FileType.BINARY
    if len(sample) < SAMPLE_SIZE or _is_valid_utf8(sample):
        if printable_ratio(sample) > PRINTABLE_THRESHOLD:
            return FileType.TEXT
        return FileType.BINARY
    return FileType.BINARY


def classify(path: str | os.PathLike[str]) -> FileType:
    """Classify *path* as TEXT or BINARY.

    Raises ``OSError`` when the content sample cannot be read; callers
    decide the fallback policy.
    """
    if has_binary_extension(path):
        return FileType.BINARY
    if has_text_extension(path):
        return FileType.TEXT
    with open(path, "rb") as fh:
        sample = fh.read(SAMPLE_SIZE)
    return classify_sample(sample)
