"""Keyword query matching over a published ``SearchIndex``."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from itertools import islice
import logging

from docs_search_index.domain.errors import InvalidQueryError
from docs_search_index.domain.model import IndexEntry, normalize_keyword
from docs_search_index.observability.metrics import SEARCH_LATENCY, track_latency
from docs_search_index.search.fuzzy import find_fuzzy_matches
from docs_search_index.search.search_index import SearchIndex


logger = logging.getLogger(__name__)


def normalize_query(query: object) -> str:
    """Normalize a query term, rejecting empty or whitespace-only input.

    Raises:
        InvalidQueryError: if the query is not a string or is blank.
    """
    if not isinstance(query, str):
        raise InvalidQueryError(f"query must be a string, got {type(query).__name__}")
    normalized = normalize_keyword(query)
    if not normalized:
        raise InvalidQueryError("query must not be empty")
    return normalized


class MatchResults:
    """Lazy, restartable sequence of matching entries.

    Nothing is scanned until iteration starts, and every ``iter()`` call
    restarts the walk from the first match.
    """

    def __init__(self, producer: Callable[[], Iterator[IndexEntry]], *, query: str, mode: str) -> None:
        self._producer = producer
        self.query = query
        self.mode = mode

    def __iter__(self) -> Iterator[IndexEntry]:
        return self._producer()

    def __bool__(self) -> bool:
        return next(iter(self), None) is not None

    def __repr__(self) -> str:
        return f"MatchResults(query={self.query!r}, mode={self.mode!r})"

    def take(self, limit: int | None) -> list[IndexEntry]:
        """Materialize at most ``limit`` matches (all of them when ``limit`` is None)."""
        if limit is not None and limit < 0:
            raise ValueError("limit must be non-negative")
        with track_latency(SEARCH_LATENCY, mode=self.mode):
            return list(islice(self, limit))

    def first(self) -> IndexEntry | None:
        return next(iter(self), None)

    def count(self) -> int:
        return sum(1 for _ in self)


class QueryMatcher:
    """Prefix, substring and fuzzy keyword lookups against one index."""

    def __init__(self, index: SearchIndex) -> None:
        self._index = index

    @property
    def index(self) -> SearchIndex:
        return self._index

    def search(self, prefix: str, *, section: str | None = None) -> MatchResults:
        """Entries whose keyword starts with ``prefix``, case-insensitive.

        Results are ordered by keyword, then by target count descending.

        Raises:
            InvalidQueryError: for an empty or whitespace-only prefix.
        """
        normalized = normalize_query(prefix)
        return MatchResults(
            lambda: self._filtered(self._index.iter_prefix(normalized), section),
            query=normalized,
            mode="prefix",
        )

    def search_substring(self, term: str, *, section: str | None = None) -> MatchResults:
        """Entries whose keyword contains ``term`` anywhere, in the same order as ``search``."""
        normalized = normalize_query(term)
        return MatchResults(
            lambda: self._filtered(self._index.iter_substring(normalized), section),
            query=normalized,
            mode="substring",
        )

    def suggest(self, term: str, limit: int = 5) -> list[str]:
        """Keywords close to ``term`` by edit distance, closest first."""
        normalized = normalize_query(term)
        matches = find_fuzzy_matches(normalized, self._index.keywords)
        suggestions = [keyword for keyword, distance in matches if distance > 0][:limit]
        logger.debug("Suggestions for %r: %s", normalized, suggestions)
        return suggestions

    @staticmethod
    def _filtered(entries: Iterator[IndexEntry], section: str | None) -> Iterator[IndexEntry]:
        if section is None:
            yield from entries
            return
        for entry in entries:
            if section in entry.sections:
                yield entry
