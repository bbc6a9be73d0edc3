"""Domain layer - value objects and errors for the documentation search index.

No I/O happens here: partitions arrive already decoded and every model is
immutable once constructed.
"""

from docs_search_index.domain.errors import (
    InvalidQueryError,
    MalformedEntryError,
    PartitionLoadError,
    SearchIndexError,
)
from docs_search_index.domain.model import (
    IndexEntry,
    IndexPartition,
    IndexTarget,
    normalize_keyword,
    section_from_key,
)


__all__ = [
    "IndexEntry",
    "IndexPartition",
    "IndexTarget",
    "InvalidQueryError",
    "MalformedEntryError",
    "PartitionLoadError",
    "SearchIndexError",
    "normalize_keyword",
    "section_from_key",
]
