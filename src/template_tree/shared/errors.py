"""Exception types for template tree operations.

Lookups on a tree report absence instead of raising; the exceptions here are
reserved for programmer errors such as searching with an empty path.
"""

from typing import Optional, Sequence


class TreeError(Exception):
    """Base exception for template tree errors."""


class TreePathError(TreeError, ValueError):
    """Raised when a path search is called with an unusable path."""

    def __init__(self, message: str, path: Optional[Sequence[str]] = None) -> None:
        super().__init__(message)
        self.path = list(path) if path is not None else None
