"""Incremental loading of partition files into a single search index."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass
import logging
import os
from pathlib import Path
import time

from docs_search_index.domain.errors import PartitionLoadError
from docs_search_index.domain.model import IndexPartition
from docs_search_index.observability.metrics import INDEX_SIZE, LOAD_FAILURES, LOAD_LATENCY, track_latency
from docs_search_index.observability.tracing import create_span
from docs_search_index.search.partition import read_partition
from docs_search_index.search.search_index import SearchIndex
from docs_search_index.search.store import EntryStore


logger = logging.getLogger(__name__)

PartitionSource = str | os.PathLike[str] | IndexPartition

# Doxygen's search/ directory ships these front-end scripts beside the data partitions
FRONTEND_SCRIPTS = frozenset({"search.js", "searchdata.js"})


@dataclass(slots=True)
class LoadReport:
    """Summary of a successful ``load_all`` call."""

    partitions: int
    entries: int
    keywords: int
    targets: int
    skipped: int
    duration_s: float

    def to_dict(self) -> dict[str, float | int]:
        return asdict(self)


def discover_partitions(directory: Path, pattern: str = "*.js") -> list[Path]:
    """List partition files under ``directory`` in name order.

    Raises:
        PartitionLoadError: if ``directory`` is not a readable directory.
    """
    if not directory.is_dir():
        raise PartitionLoadError(f"index directory does not exist: {directory}", source=directory)
    return sorted(
        path for path in directory.glob(pattern) if path.is_file() and path.name.lower() not in FRONTEND_SCRIPTS
    )


class IncrementalLoader:
    """Builds a ``SearchIndex`` from partitions in any order.

    The whole load happens in a private ``EntryStore``; the index is only
    published after every source decoded, so a failing source never leaves
    a partial index behind.
    """

    def __init__(self, reader: Callable[[Path], IndexPartition] = read_partition) -> None:
        self._reader = reader
        self.last_report: LoadReport | None = None

    def _resolve(self, source: PartitionSource) -> IndexPartition:
        if isinstance(source, IndexPartition):
            return source
        if isinstance(source, (str, os.PathLike)):
            return self._reader(Path(source))
        raise PartitionLoadError(f"unsupported partition source type {type(source).__name__}", source=repr(source))

    def load_all(self, sources: Iterable[PartitionSource]) -> SearchIndex:
        """Load every source and publish the merged index.

        Raises:
            PartitionLoadError: on the first unreadable or malformed source; nothing is published.
        """
        start = time.perf_counter()
        store = EntryStore()
        skipped = 0
        loaded = 0

        with create_span("search_index.load_all") as span, track_latency(LOAD_LATENCY, stage="load_all"):
            for source in sources:
                try:
                    partition = self._resolve(source)
                except PartitionLoadError as exc:
                    LOAD_FAILURES.labels(reason=type(exc.__cause__).__name__ if exc.__cause__ else "invalid").inc()
                    logger.error("Aborting index load: %s", exc)
                    raise
                store.load(partition)
                skipped += partition.skipped
                loaded += 1

            index = store.snapshot()
            span.set_attribute("search_index.partitions", loaded)
            span.set_attribute("search_index.entries", len(index))

        if not loaded:
            logger.warning("No partitions supplied; published an empty index")

        INDEX_SIZE.labels(kind="entries").set(len(index))
        INDEX_SIZE.labels(kind="keywords").set(len(index.keywords))

        self.last_report = LoadReport(
            partitions=loaded,
            entries=len(index),
            keywords=len(index.keywords),
            targets=index.target_count,
            skipped=skipped,
            duration_s=time.perf_counter() - start,
        )
        logger.info(
            "Search index loaded: %d partitions, %d keywords, %d targets (%d records skipped)",
            loaded,
            self.last_report.keywords,
            self.last_report.targets,
            skipped,
        )
        return index

    def load_directory(self, directory: Path, pattern: str = "*.js") -> SearchIndex:
        """Discover and load every partition file under ``directory``."""
        return self.load_all(discover_partitions(directory, pattern))


def load_all(sources: Iterable[PartitionSource]) -> SearchIndex:
    """Build a ``SearchIndex`` from partition sources with a default loader."""
    return IncrementalLoader().load_all(sources)
