"""Exception hierarchy for the text search engine."""

from __future__ import annotations


class TextSearchError(Exception):
    """Base class for every error raised by redis-text-search."""


class NoFinderError(TextSearchError):
    """Raised when no finder was declared for the index and none was supplied."""


class UnknownIndexError(TextSearchError, KeyError):
    """Raised when a query or update references a field that was never declared."""

    def __init__(self, field: str, prefix: str | None = None) -> None:
        self.field = field
        self.prefix = prefix
        owner = f" in {prefix}" if prefix else ""
        super().__init__(f"No such text index {field!r}{owner}")

    def __str__(self) -> str:
        return str(self.args[0])


class BadConditionsError(TextSearchError, ValueError):
    """Raised when finder conditions already constrain the primary key."""


class StoreFailureError(TextSearchError):
    """Raised when the key-value store fails, including mid-batch failures."""
