"""Search index and incremental lookup engine for generated API documentation."""

from docs_search_index.domain import (
    IndexEntry,
    IndexPartition,
    IndexTarget,
    InvalidQueryError,
    MalformedEntryError,
    PartitionLoadError,
    SearchIndexError,
)
from docs_search_index.search.loader import IncrementalLoader, LoadReport, discover_partitions, load_all
from docs_search_index.search.matcher import MatchResults, QueryMatcher
from docs_search_index.search.partition import decode_entry, decode_records, read_partition
from docs_search_index.search.search_index import SearchIndex
from docs_search_index.search.store import EntryStore


__version__ = "0.1.0"

__all__ = [
    "EntryStore",
    "IncrementalLoader",
    "IndexEntry",
    "IndexPartition",
    "IndexTarget",
    "InvalidQueryError",
    "LoadReport",
    "MalformedEntryError",
    "MatchResults",
    "PartitionLoadError",
    "QueryMatcher",
    "SearchIndex",
    "SearchIndexError",
    "decode_entry",
    "decode_records",
    "discover_partitions",
    "load_all",
    "read_partition",
]
