"""Domain errors raised while loading and querying the search index."""

from __future__ import annotations

from pathlib import Path


class SearchIndexError(Exception):
    """Base class for search index errors."""


class MalformedEntryError(SearchIndexError, ValueError):
    """Raised when a partition record lacks a keyword or target list."""

    def __init__(self, message: str, *, record: object = None, position: int | None = None) -> None:
        super().__init__(message)
        self.record = record
        self.position = position


class PartitionLoadError(SearchIndexError, RuntimeError):
    """Raised when a partition source cannot be read or decoded."""

    def __init__(self, message: str, *, source: str | Path | None = None) -> None:
        super().__init__(message)
        self.source = str(source) if source is not None else None


class InvalidQueryError(SearchIndexError, ValueError):
    """Raised for empty or whitespace-only queries."""
