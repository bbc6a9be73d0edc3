"""Command line interface for querying generated documentation search data."""

from __future__ import annotations

import argparse
from collections.abc import Sequence
import logging
from pathlib import Path
import sys

import orjson
from pydantic import ValidationError

from docs_search_index.config import Settings
from docs_search_index.domain.errors import InvalidQueryError, PartitionLoadError
from docs_search_index.domain.model import IndexEntry
from docs_search_index.observability.logging import configure_logging
from docs_search_index.observability.metrics import get_metrics
from docs_search_index.search.loader import IncrementalLoader, discover_partitions
from docs_search_index.search.matcher import QueryMatcher
from docs_search_index.search.partition import dump_partition, read_partition
from docs_search_index.search.search_index import SearchIndex


logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_QUERY = 2


def build_argument_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docs-search-index",
        description="Query keyword search partitions produced by a documentation generator",
    )
    parser.add_argument(
        "--index-dir",
        type=Path,
        default=settings.search_index_dir,
        help=f"Directory holding partition files (default: {settings.search_index_dir})",
    )
    parser.add_argument(
        "--pattern",
        default=settings.partition_pattern,
        help=f"Glob selecting partition files (default: {settings.partition_pattern})",
    )
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    query = subparsers.add_parser("query", help="List entries whose keyword starts with PREFIX")
    query.add_argument("prefix")
    query.add_argument("--limit", type=int, default=settings.max_results, help="Maximum entries to print")
    query.add_argument("--section", help="Only entries from this section (e.g. functions, classes)")
    query.add_argument("--substring", action="store_true", help="Match the term anywhere in the keyword")
    query.add_argument("--json", action="store_true", help="Emit JSON lines")

    get = subparsers.add_parser("get", help="Exact keyword lookup")
    get.add_argument("keyword")
    get.add_argument("--json", action="store_true", help="Emit JSON lines")

    stats = subparsers.add_parser("stats", help="Summarize the loaded index")
    stats_output = stats.add_mutually_exclusive_group()
    stats_output.add_argument("--json", action="store_true", help="Emit JSON")
    stats_output.add_argument("--metrics", action="store_true", help="Emit Prometheus metrics collected by the load")

    convert = subparsers.add_parser("convert", help="Rewrite partitions as stable-layout JSON files")
    convert.add_argument("output_dir", type=Path)

    parser.set_defaults(suggestion_limit=settings.suggestion_limit)
    return parser


def _entry_payload(entry: IndexEntry) -> dict[str, object]:
    return {
        "keyword": entry.keyword,
        "display_name": entry.display_name,
        "sections": sorted(entry.sections),
        "aliases": sorted(entry.aliases),
        "targets": [
            {"page_anchor": target.page_anchor, "owner_signature": target.owner_signature} for target in entry.targets
        ],
    }


def _format_entry(entry: IndexEntry) -> str:
    lines = [f"{entry.display_name} ({entry.target_count})"]
    lines.extend(f"  {target.owner_signature or '-'}  {target.page_anchor}" for target in entry.targets)
    return "\n".join(lines)


def _print_entries(entries: Sequence[IndexEntry], *, as_json: bool) -> None:
    for entry in entries:
        if as_json:
            sys.stdout.write(orjson.dumps(_entry_payload(entry)).decode("utf-8") + "\n")
        else:
            sys.stdout.write(_format_entry(entry) + "\n")


def _print_suggestions(matcher: QueryMatcher, term: str, limit: int) -> None:
    if limit <= 0:
        return
    suggestions = matcher.suggest(term, limit=limit)
    if suggestions:
        sys.stderr.write(f"No matches. Did you mean: {', '.join(suggestions)}\n")


def _run_query(args: argparse.Namespace, index: SearchIndex) -> int:
    matcher = QueryMatcher(index)
    if args.limit < 1:
        raise InvalidQueryError("--limit must be >= 1")
    if args.substring:
        results = matcher.search_substring(args.prefix, section=args.section)
    else:
        results = matcher.search(args.prefix, section=args.section)
    entries = results.take(args.limit)
    if not entries:
        _print_suggestions(matcher, args.prefix, args.suggestion_limit)
        return EXIT_FAILURE
    _print_entries(entries, as_json=args.json)
    return EXIT_OK


def _run_get(args: argparse.Namespace, index: SearchIndex) -> int:
    matcher = QueryMatcher(index)
    entries = index.get(args.keyword)
    if not entries:
        _print_suggestions(matcher, args.keyword, args.suggestion_limit)
        return EXIT_FAILURE
    _print_entries(entries, as_json=args.json)
    return EXIT_OK


def _run_stats(args: argparse.Namespace, index: SearchIndex) -> int:
    if args.metrics:
        sys.stdout.write(get_metrics().decode("utf-8"))
        return EXIT_OK
    payload = {**index.stats(), "sections": sorted(index.sections)}
    if args.json:
        sys.stdout.write(orjson.dumps(payload, option=orjson.OPT_SORT_KEYS).decode("utf-8") + "\n")
    else:
        for key, value in payload.items():
            shown = ", ".join(value) if isinstance(value, list) else value
            sys.stdout.write(f"{key:<10} {shown}\n")
    return EXIT_OK


def _run_convert(args: argparse.Namespace) -> int:
    args.output_dir.mkdir(parents=True, exist_ok=True)
    for path in discover_partitions(args.index_dir, args.pattern):
        partition = read_partition(path)
        target = args.output_dir / f"{partition.key}.json"
        target.write_bytes(dump_partition(partition))
        logger.info("Wrote %s (%d entries)", target, len(partition))
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = Settings()
    except ValidationError as exc:
        sys.stderr.write(f"Invalid configuration: {exc}\n")
        return EXIT_FAILURE

    parser = build_argument_parser(settings)
    args = parser.parse_args(argv)
    configure_logging(args.log_level, json_output=settings.log_json)

    try:
        if args.command == "convert":
            return _run_convert(args)

        index = IncrementalLoader().load_directory(args.index_dir, args.pattern)
        if args.command == "query":
            return _run_query(args, index)
        if args.command == "get":
            return _run_get(args, index)
        return _run_stats(args, index)
    except PartitionLoadError as exc:
        logger.error("Cannot load search index: %s", exc)
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_FAILURE
    except InvalidQueryError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return EXIT_INVALID_QUERY


if __name__ == "__main__":
    sys.exit(main())
