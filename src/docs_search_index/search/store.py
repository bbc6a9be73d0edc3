"""Mutable entry store used while an index is being assembled."""

from __future__ import annotations

import logging

from docs_search_index.domain.errors import MalformedEntryError
from docs_search_index.domain.model import IndexEntry, IndexPartition, normalize_keyword
from docs_search_index.search.search_index import SearchIndex


logger = logging.getLogger(__name__)


class EntryStore:
    """Keyword -> links table built from decoded partitions.

    One entry is kept per normalized keyword. Loading an entry whose keyword
    is already present concatenates target lists and drops repeated
    ``(page_anchor, owner_signature)`` pairs, so loading a partition twice is
    a no-op. The first display name seen wins; other spellings end up in
    ``IndexEntry.aliases``.
    """

    def __init__(self) -> None:
        self._entries: dict[str, IndexEntry] = {}
        self._partition_keys: list[str] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def partition_keys(self) -> tuple[str, ...]:
        return tuple(self._partition_keys)

    @property
    def sections(self) -> frozenset[str]:
        return frozenset().union(*(entry.sections for entry in self._entries.values()))

    def add(self, entry: IndexEntry, *, section: str | None = None) -> IndexEntry:
        """Insert or merge a single entry and return the stored version.

        Raises:
            MalformedEntryError: if the entry lacks a keyword or targets.
        """
        if not entry.keyword or not entry.targets:
            raise MalformedEntryError(f"entry {entry.display_name!r} lacks a keyword or targets", record=entry)

        if section and section not in entry.sections:
            entry = entry.model_copy(update={"sections": entry.sections | {section}})

        existing = self._entries.get(entry.keyword)
        stored = entry if existing is None else existing.merged_with(entry)
        self._entries[entry.keyword] = stored
        return stored

    def load(self, partition: IndexPartition) -> None:
        """Append a partition's entries, skipping (and logging) malformed ones."""
        skipped = 0
        for entry in partition.entries:
            try:
                self.add(entry, section=partition.section)
            except MalformedEntryError as exc:
                skipped += 1
                logger.warning("Skipping malformed entry in partition %s: %s", partition.key, exc)

        if partition.key not in self._partition_keys:
            self._partition_keys.append(partition.key)
        logger.debug(
            "Loaded partition %s (%d entries, %d skipped); store holds %d entries",
            partition.key,
            len(partition.entries) - skipped,
            skipped,
            len(self),
        )

    def get(self, keyword: str) -> tuple[IndexEntry, ...]:
        """Exact keyword lookup; empty tuple when absent."""
        entry = self._entries.get(normalize_keyword(keyword))
        return () if entry is None else (entry,)

    def snapshot(self) -> SearchIndex:
        """Publish the current content as an immutable ``SearchIndex``."""
        return SearchIndex(self._entries.values(), partition_keys=self._partition_keys)
