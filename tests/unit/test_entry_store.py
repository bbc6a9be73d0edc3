"""Unit tests for the mutable entry store."""

import logging

import pytest

from docs_search_index.domain.errors import MalformedEntryError
from docs_search_index.domain.model import IndexEntry, IndexPartition, IndexTarget
from docs_search_index.search.partition import decode_records, read_partition
from docs_search_index.search.store import EntryStore


def _entry(keyword: str, *anchors: str, display_name: str | None = None, owner: str = "icu::X") -> IndexEntry:
    return IndexEntry(
        keyword=keyword,
        display_name=display_name or keyword,
        targets=tuple(IndexTarget(page_anchor=anchor, owner_signature=owner) for anchor in anchors),
    )


def _partition(key: str, *entries: IndexEntry) -> IndexPartition:
    return IndexPartition(key=key, entries=entries, section=key.rsplit("_", 1)[0])


@pytest.fixture
def store() -> EntryStore:
    return EntryStore()


class TestLoad:
    def test_load_then_get(self, store: EntryStore):
        store.load(_partition("functions_2", _entry("build", "a", "b")))

        (entry,) = store.get("build")
        assert [target.page_anchor for target in entry.targets] == ["a", "b"]
        assert entry.sections == frozenset({"functions"})

    def test_get_is_case_insensitive(self, store: EntryStore):
        store.load(_partition("functions_2", _entry("Builder", "a", display_name="Builder")))
        assert store.get("BUILDER")[0].display_name == "Builder"
        assert store.get(" builder ")[0].display_name == "Builder"

    def test_get_absent_keyword_is_empty(self, store: EntryStore):
        assert store.get("missing") == ()

    def test_overlapping_partitions_union_targets_without_duplicates(self, store: EntryStore):
        store.load(_partition("functions_2", _entry("build", "a", "b")))
        store.load(_partition("classes_1", _entry("build", "b", "c")))

        (entry,) = store.get("build")
        identities = [target.identity for target in entry.targets]
        assert identities == [("a", "icu::X"), ("b", "icu::X"), ("c", "icu::X")]
        assert len(identities) == len(set(identities))
        assert entry.sections == frozenset({"functions", "classes"})

    def test_same_anchor_different_owner_is_kept(self, store: EntryStore):
        store.load(_partition("functions_2", _entry("build", "a", owner="icu::A")))
        store.load(_partition("classes_1", _entry("build", "a", owner="icu::B")))
        assert store.get("build")[0].target_count == 2

    def test_loading_twice_is_idempotent(self, store: EntryStore, functions_partition_path):
        partition = read_partition(functions_partition_path)
        once = EntryStore()
        once.load(partition)

        store.load(partition)
        store.load(partition)

        assert store.snapshot() == once.snapshot()
        assert store.partition_keys == ("functions_2",)

    def test_spellings_of_one_keyword_merge_into_one_entry(self, store: EntryStore):
        store.load(_partition("classes_1", _entry("builder", "a", display_name="Builder")))
        store.load(_partition("functions_2", _entry("builder", "a", "b", display_name="builder")))

        (entry,) = store.get("builder")
        assert entry.display_name == "Builder"
        assert entry.aliases == frozenset({"builder"})
        assert [target.page_anchor for target in entry.targets] == ["a", "b"]
        assert entry.sections == frozenset({"classes", "functions"})
        assert len(store) == 1

    def test_malformed_entry_skipped_and_logged(self, store: EntryStore, caplog):
        broken = IndexEntry.model_construct(keyword="", display_name="broken", targets=())
        partition = IndexPartition.model_construct(
            key="functions_2",
            entries=(_entry("before", "a"), broken, _entry("build", "b")),
            section="functions",
            source=None,
            skipped=0,
        )

        with caplog.at_level(logging.WARNING, logger="docs_search_index.search.store"):
            store.load(partition)

        assert store.get("before")
        assert store.get("build")
        assert len(store) == 2
        assert "Skipping malformed entry" in caplog.text

    def test_malformed_records_from_decoder_do_not_block_partition(self, store: EntryStore):
        partition = decode_records(
            "functions_2",
            [
                ["build", "build", [["../a.html#x", "icu::A"]]],
                ["", "nameless", [["../b.html#y", "icu::B"]]],
                ["before", "before", [["../c.html#z", "icu::C"]]],
            ],
        )
        store.load(partition)
        assert store.get("build") and store.get("before")
        assert partition.skipped == 1


class TestAdd:
    def test_add_rejects_entry_without_targets(self, store: EntryStore):
        broken = IndexEntry.model_construct(keyword="build", display_name="build", targets=(), sections=frozenset())
        with pytest.raises(MalformedEntryError):
            store.add(broken)

    def test_add_returns_merged_entry(self, store: EntryStore):
        store.add(_entry("build", "a"))
        merged = store.add(_entry("build", "b"), section="functions")
        assert [target.page_anchor for target in merged.targets] == ["a", "b"]
        assert merged.sections == frozenset({"functions"})


def test_snapshot_is_detached_from_later_loads(store: EntryStore):
    store.load(_partition("functions_2", _entry("build", "a")))
    index = store.snapshot()

    store.load(_partition("functions_3", _entry("before", "b")))

    assert "before" not in index
    assert "build" in index
    assert store.sections == frozenset({"functions"})
