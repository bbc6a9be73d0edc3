"""Unit tests for decoding partition files."""

import logging
from pathlib import Path

import orjson
import pytest

from docs_search_index.domain.errors import MalformedEntryError, PartitionLoadError
from docs_search_index.search.partition import (
    decode_entry,
    decode_records,
    dump_partition,
    parse_search_data_script,
    read_partition,
)
from tests.fixtures.search_data import EXTRA_RECORDS


class TestDecodeEntry:
    def test_stable_three_field_layout(self):
        entry = decode_entry(["Builder", "Builder", [["../b.html#a1", "icu::LocaleMatcher::Builder"]]])

        assert entry.keyword == "builder"
        assert entry.display_name == "Builder"
        assert entry.targets[0].page_anchor == "../b.html#a1"
        assert entry.targets[0].owner_signature == "icu::LocaleMatcher::Builder"

    def test_doxygen_layout_uses_display_name_and_skips_flag(self):
        record = [
            "before_7158",
            ["before", ["../classicu_1_1Calendar.html#a888", 1, "icu::Calendar"], ["../c.html#b", 1, "icu::Other"]],
        ]

        entry = decode_entry(record)

        assert entry.keyword == "before"
        assert [target.owner_signature for target in entry.targets] == ["icu::Calendar", "icu::Other"]

    def test_html_entities_are_unescaped(self):
        record = ["builder_1", ["Builder", ["../b.html#a", 1, "icu::Builder::Builder(Builder &amp;&amp;src)"]]]
        entry = decode_entry(record)
        assert entry.targets[0].owner_signature == "icu::Builder::Builder(Builder &&src)"

    def test_target_without_owner(self):
        entry = decode_entry(["bytesink_1", ["ByteSink", ["../classicu_1_1ByteSink.html", 0, ""]]])
        assert entry.targets[0].owner_signature == ""

    @pytest.mark.parametrize(
        "record",
        [
            "build",
            ["", "build", [["../a.html", "icu::A"]]],
            [None, "build", [["../a.html", "icu::A"]]],
            ["build", "build", []],
            ["build", "build", None],
            ["build", "build", [[""]]],
            ["build_1", ["build"]],
            ["build_1", []],
            ["build_1", ["build", [["child_1", ["child", ["../a.html", 1, "icu::A"]]]]]],
            ["only-one-field"],
        ],
    )
    def test_malformed_records_raise(self, record):
        with pytest.raises(MalformedEntryError):
            decode_entry(record, position=7)

    def test_error_carries_position(self):
        with pytest.raises(MalformedEntryError) as exc_info:
            decode_entry(["build", "build", []], position=3)
        assert exc_info.value.position == 3


class TestDecodeRecords:
    def test_malformed_record_does_not_block_valid_ones(self, caplog):
        with caplog.at_level(logging.WARNING, logger="docs_search_index.search.partition"):
            partition = decode_records("extra_0", EXTRA_RECORDS)

        assert [entry.keyword for entry in partition.entries] == ["buildpattern", "breakiterator"]
        assert partition.skipped == 1
        assert partition.section == "extra"
        assert "Skipping malformed record 1" in caplog.text

    def test_explicit_section_wins(self):
        partition = decode_records("extra_0", EXTRA_RECORDS, section="functions")
        assert partition.section == "functions"

    def test_non_sequence_raises_partition_error(self):
        with pytest.raises(PartitionLoadError):
            decode_records("broken", {"not": "records"})


class TestParseSearchDataScript:
    def test_extracts_records(self):
        records = parse_search_data_script("var searchData=\n[\n  ['a_1',['a',['../a.html',1,'A']]]\n];\n")
        assert records == [["a_1", ["a", ["../a.html", 1, "A"]]]]

    def test_escaped_quotes(self):
        records = parse_search_data_script("var searchData=[['op_1',['operator\\'',['../a.html',1,'A']]]];")
        assert records[0][1][0] == "operator'"

    @pytest.mark.parametrize(
        "text",
        [
            "function SearchBox() {}",
            "var searchData=[['a_1',['a',['../a.html',1,'A']]];",
            "var searchData=[__import__('os')];",
        ],
    )
    def test_invalid_scripts_raise(self, text):
        with pytest.raises(PartitionLoadError):
            parse_search_data_script(text)


class TestReadPartition:
    def test_reads_doxygen_script(self, functions_partition_path: Path):
        partition = read_partition(functions_partition_path)

        assert partition.key == "functions_2"
        assert partition.section == "functions"
        assert partition.source == str(functions_partition_path)
        assert partition.skipped == 0
        assert partition.entries[0].display_name == "BasicTimeZone"
        assert partition.entries[0].targets[0].owner_signature == (
            "icu::BasicTimeZone::BasicTimeZone(const UnicodeString &id)"
        )

    def test_reads_json_partition(self, json_partition_path: Path):
        partition = read_partition(json_partition_path)
        assert partition.key == "extra_0"
        assert len(partition) == 2
        assert partition.skipped == 1

    def test_missing_file(self, tmp_path: Path):
        missing = tmp_path / "functions_9.js"
        with pytest.raises(PartitionLoadError) as exc_info:
            read_partition(missing)
        assert exc_info.value.source == str(missing)
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_invalid_json(self, tmp_path: Path):
        path = tmp_path / "broken_0.json"
        path.write_text("[[", encoding="utf-8")
        with pytest.raises(PartitionLoadError):
            read_partition(path)

    def test_json_object_is_not_a_partition(self, tmp_path: Path):
        path = tmp_path / "broken_0.json"
        path.write_bytes(orjson.dumps({"entries": []}))
        with pytest.raises(PartitionLoadError):
            read_partition(path)

    def test_unsupported_suffix(self, tmp_path: Path):
        path = tmp_path / "functions_2.html"
        path.write_text("<html></html>", encoding="utf-8")
        with pytest.raises(PartitionLoadError, match="unsupported partition format"):
            read_partition(path)

    def test_non_utf8_script(self, tmp_path: Path):
        path = tmp_path / "functions_3.js"
        path.write_bytes(b"var searchData=[['\xff',['x',['../a.html',1,'A']]]];")
        with pytest.raises(PartitionLoadError):
            read_partition(path)


def test_dump_partition_uses_stable_layout(functions_partition_path: Path, tmp_path: Path):
    partition = read_partition(functions_partition_path)
    converted = tmp_path / "functions_2.json"
    converted.write_bytes(dump_partition(partition))

    records = orjson.loads(converted.read_bytes())
    assert records[2][0] == "build"
    assert records[2][1] == "build"
    assert records[2][2][0] == [
        "../classicu_1_1BytesTrieBuilder.html#ab57bf7a057776c9efaf98720788359df",
        "icu::BytesTrieBuilder::build()",
    ]
    assert read_partition(converted).entries == partition.entries
