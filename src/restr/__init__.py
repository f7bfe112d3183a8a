"""restr — recursive literal string replacement across a directory tree."""

__all__ = [
    "__version__",
    "replace_tree",
    "ReplaceConfig",
    "ReplaceResult",
    "FileType",
]
__version__ = "0.1.0"

# Programmatic entrypoints (backend use).
from restr.api import replace_tree  # noqa: E402, F401
from restr.core.config import ReplaceConfig  # noqa: E402, F401
from restr.model import FileType  # noqa: E402, F401
from restr.model.result import ReplaceResult  # noqa: E402, F401
