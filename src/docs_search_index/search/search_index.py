"""Immutable, shareable search index.

A ``SearchIndex`` is published once by the loader and never mutated: entries
live in a tuple ranked by ``(keyword, -target_count, display_name)`` so that
keyword order doubles as the prefix-scan order, and exact lookups go through
a read-only mapping. Concurrent readers need no locking.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator
from itertools import groupby
from types import MappingProxyType

from docs_search_index.domain.model import IndexEntry, normalize_keyword


def rank_key(entry: IndexEntry) -> tuple[str, int, str]:
    """Lexicographic keyword order, then most targets first, then display name."""
    return (entry.keyword, -entry.target_count, entry.display_name)


class SearchIndex:
    """Union of all loaded partitions, keyed for exact and prefix lookup."""

    __slots__ = ("_by_keyword", "_keywords", "_ordered", "_partition_keys")

    def __init__(self, entries: Iterable[IndexEntry] = (), partition_keys: Iterable[str] = ()) -> None:
        ordered = tuple(sorted(entries, key=rank_key))
        self._ordered = ordered
        self._keywords = tuple(entry.keyword for entry in ordered)
        self._by_keyword = MappingProxyType(
            {keyword: tuple(group) for keyword, group in groupby(ordered, key=lambda entry: entry.keyword)}
        )
        self._partition_keys = tuple(dict.fromkeys(partition_keys))

    def __len__(self) -> int:
        return len(self._ordered)

    def __iter__(self) -> Iterator[IndexEntry]:
        return iter(self._ordered)

    def __contains__(self, keyword: object) -> bool:
        return isinstance(keyword, str) and normalize_keyword(keyword) in self._by_keyword

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchIndex):
            return NotImplemented
        return self._ordered == other._ordered

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"SearchIndex(entries={len(self._ordered)}, keywords={len(self._by_keyword)})"

    @property
    def entries(self) -> tuple[IndexEntry, ...]:
        return self._ordered

    @property
    def keywords(self) -> tuple[str, ...]:
        """Distinct keywords in lexicographic order."""
        return tuple(self._by_keyword)

    @property
    def partition_keys(self) -> tuple[str, ...]:
        return self._partition_keys

    @property
    def sections(self) -> frozenset[str]:
        return frozenset().union(*(entry.sections for entry in self._ordered))

    @property
    def target_count(self) -> int:
        return sum(entry.target_count for entry in self._ordered)

    def get(self, keyword: str) -> tuple[IndexEntry, ...]:
        """Exact keyword lookup; empty tuple when absent."""
        return self._by_keyword.get(normalize_keyword(keyword), ())

    def iter_prefix(self, prefix: str) -> Iterator[IndexEntry]:
        """Yield entries whose keyword starts with an already-normalized prefix."""
        start = bisect_left(self._keywords, prefix)
        for position in range(start, len(self._ordered)):
            if not self._keywords[position].startswith(prefix):
                return
            yield self._ordered[position]

    def iter_substring(self, term: str) -> Iterator[IndexEntry]:
        """Yield entries whose keyword contains an already-normalized term."""
        for position, keyword in enumerate(self._keywords):
            if term in keyword:
                yield self._ordered[position]

    def stats(self) -> dict[str, int]:
        return {
            "partitions": len(self._partition_keys),
            "keywords": len(self._by_keyword),
            "entries": len(self._ordered),
            "targets": self.target_count,
        }
