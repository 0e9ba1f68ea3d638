"""Exceptions raised by the search stack.

Every failure here is recoverable: callers catch these at the build loop or the
index handle and fall back to placeholder documents or empty result sets.
"""

from __future__ import annotations


class SearchError(Exception):
    """Base class for search errors."""


class BuildError(SearchError):
    """Raised when a page cannot be turned into a search document."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"{source}: {reason}")
        self.source = source
        self.reason = reason


class IndexLoadError(SearchError):
    """Raised when a serialized index cannot be fetched or parsed."""
