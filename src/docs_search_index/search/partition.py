"""Partition codec for generated documentation search data.

Two on-disk layouts are understood:

* JSON partitions (``*.json``) holding the stable record layout
  ``[keyword, displayName, [[anchorURL, ownerSignature], ...]]``.
* Doxygen search scripts (``search/<section>_<n>.js``) of the form
  ``var searchData=[ ['build_7160',['build',['../x.html#a1',1,'icu::X::build()']]], ... ];``
  where targets follow the display name as siblings and carry a flag in
  the middle slot.

Decoding is record-tolerant and source-strict: a malformed record is
skipped with a warning, while a source that cannot be read or is not a
record sequence raises ``PartitionLoadError``.
"""

from __future__ import annotations

import ast
from collections.abc import Iterable, Sequence
import html
import logging
from pathlib import Path
import re
from typing import Any

import orjson
from pydantic import ValidationError

from docs_search_index.domain.errors import MalformedEntryError, PartitionLoadError
from docs_search_index.domain.model import IndexEntry, IndexPartition, IndexTarget, section_from_key
from docs_search_index.observability.context import bind_partition
from docs_search_index.observability.metrics import PARTITIONS_LOADED, RECORDS_SKIPPED
from docs_search_index.observability.tracing import create_span


logger = logging.getLogger(__name__)

_SEARCH_DATA_SCRIPT = re.compile(r"^\s*var\s+searchData\s*=\s*(?P<body>\[.*\])\s*;?\s*$", re.DOTALL)

JSON_SUFFIXES = frozenset({".json"})
SCRIPT_SUFFIXES = frozenset({".js"})


def _is_sequence(value: object) -> bool:
    return isinstance(value, (list, tuple))


def _text(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return html.unescape(value).strip()


def _build_entry(
    keyword: str,
    display_name: str,
    targets: list[IndexTarget],
    record: object,
    position: int | None,
) -> IndexEntry:
    if not keyword:
        raise MalformedEntryError("record has no keyword", record=record, position=position)
    if not targets:
        raise MalformedEntryError(f"record {keyword!r} has no targets", record=record, position=position)
    try:
        return IndexEntry(keyword=keyword, display_name=display_name or keyword, targets=tuple(targets))
    except ValidationError as exc:
        raise MalformedEntryError(f"record {keyword!r} is invalid: {exc}", record=record, position=position) from exc


def _decode_target(raw: object, *, record: object, position: int | None) -> IndexTarget:
    if not _is_sequence(raw) or not raw:
        raise MalformedEntryError("target is not a link list", record=record, position=position)
    anchor = raw[0]
    owner = raw[-1] if len(raw) > 1 else ""
    if not isinstance(anchor, str) or not anchor.strip():
        raise MalformedEntryError("target has no anchor URL", record=record, position=position)
    return IndexTarget(page_anchor=anchor.strip(), owner_signature=_text(owner))


def decode_entry(record: object, position: int | None = None) -> IndexEntry:
    """Decode one persisted record into an ``IndexEntry``.

    Accepts the three-field JSON layout and the two-field Doxygen layout.

    Raises:
        MalformedEntryError: when the keyword or target list is missing or unusable.
    """
    if not _is_sequence(record):
        raise MalformedEntryError("record is not a list", record=record, position=position)

    if len(record) == 3:
        keyword, display_name, raw_targets = record
        if not _is_sequence(raw_targets):
            raise MalformedEntryError("record has no target list", record=record, position=position)
        targets = [_decode_target(raw, record=record, position=position) for raw in raw_targets]
        return _build_entry(_text(keyword), _text(display_name), targets, record, position)

    if len(record) == 2 and _is_sequence(record[1]):
        body = record[1]
        if not body:
            raise MalformedEntryError("record has no display name", record=record, position=position)
        display_name = _text(body[0])
        if len(body) > 1 and _is_sequence(body[1]) and body[1] and _is_sequence(body[1][0]):
            # Grouped form [name, [[child record], ...]] nests records instead of links
            raise MalformedEntryError("grouped records are not supported", record=record, position=position)
        targets = [_decode_target(raw, record=record, position=position) for raw in body[1:]]
        return _build_entry(display_name, display_name, targets, record, position)

    raise MalformedEntryError("record has no keyword or target list", record=record, position=position)


def decode_records(
    key: str,
    records: object,
    *,
    section: str | None = None,
    source: str | Path | None = None,
) -> IndexPartition:
    """Decode a record sequence into an ``IndexPartition``, skipping malformed records."""
    if not _is_sequence(records):
        raise PartitionLoadError(f"partition {key!r} is not a record sequence", source=source)

    section = section or section_from_key(key)
    entries: list[IndexEntry] = []
    skipped = 0
    with bind_partition(key):
        for position, record in enumerate(records):
            try:
                entries.append(decode_entry(record, position))
            except MalformedEntryError as exc:
                skipped += 1
                logger.warning("Skipping malformed record %d in partition %s: %s", position, key, exc)

    if skipped:
        RECORDS_SKIPPED.labels(section=section).inc(skipped)
    PARTITIONS_LOADED.labels(section=section).inc()

    return IndexPartition(
        key=key,
        entries=tuple(entries),
        section=section,
        source=str(source) if source is not None else None,
        skipped=skipped,
    )


def parse_search_data_script(text: str, *, source: str | Path | None = None) -> list[Any]:
    """Extract the record list from a Doxygen ``var searchData=[...];`` script."""
    match = _SEARCH_DATA_SCRIPT.match(text)
    if match is None:
        raise PartitionLoadError("script does not define searchData", source=source)
    try:
        # Doxygen emits single-quoted string and integer literals only
        records = ast.literal_eval(match.group("body"))
    except (ValueError, SyntaxError, MemoryError, RecursionError) as exc:
        raise PartitionLoadError(f"searchData literal cannot be parsed: {exc}", source=source) from exc
    if not isinstance(records, list):
        raise PartitionLoadError("searchData is not a list", source=source)
    return records


def parse_json_records(data: bytes, *, source: str | Path | None = None) -> Any:
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as exc:
        raise PartitionLoadError(f"partition JSON cannot be parsed: {exc}", source=source) from exc


def read_partition(path: Path, *, section: str | None = None) -> IndexPartition:
    """Read and decode one partition file.

    Raises:
        PartitionLoadError: when the file is unreadable or not a record sequence.
    """
    key = path.stem
    with create_span("search_index.read_partition", attributes={"partition.key": key, "partition.path": str(path)}):
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise PartitionLoadError(f"cannot read partition {path}: {exc}", source=path) from exc

        suffix = path.suffix.lower()
        if suffix in SCRIPT_SUFFIXES:
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise PartitionLoadError(f"partition {path} is not UTF-8: {exc}", source=path) from exc
            records = parse_search_data_script(text, source=path)
        elif suffix in JSON_SUFFIXES:
            records = parse_json_records(data, source=path)
        else:
            raise PartitionLoadError(f"unsupported partition format {suffix or '<none>'!r}", source=path)

        partition = decode_records(key, records, section=section, source=path)

    logger.debug(
        "Decoded partition %s: %d entries, %d skipped",
        key,
        len(partition.entries),
        partition.skipped,
    )
    return partition


def encode_entries(entries: Iterable[IndexEntry]) -> list[list[Any]]:
    """Convert entries to the stable three-field record layout."""
    return [
        [
            entry.keyword,
            entry.display_name,
            [[target.page_anchor, target.owner_signature] for target in entry.targets],
        ]
        for entry in entries
    ]


def dump_partition(partition: IndexPartition | Sequence[IndexEntry]) -> bytes:
    """Serialize entries as a stable-layout JSON partition."""
    entries = partition.entries if isinstance(partition, IndexPartition) else partition
    return orjson.dumps(encode_entries(entries), option=orjson.OPT_INDENT_2)
