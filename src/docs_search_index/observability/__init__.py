"""Observability module for OpenTelemetry-aligned tracing, metrics, and logging."""

from docs_search_index.observability.context import bind_partition, get_trace_context, trace_context
from docs_search_index.observability.logging import JsonFormatter, configure_logging
from docs_search_index.observability.metrics import (
    INDEX_SIZE,
    LOAD_FAILURES,
    LOAD_LATENCY,
    PARTITIONS_LOADED,
    RECORDS_SKIPPED,
    SEARCH_LATENCY,
    get_metrics,
    init_metrics,
    track_latency,
)
from docs_search_index.observability.tracing import create_span, get_tracer, init_tracing


__all__ = [
    "INDEX_SIZE",
    "LOAD_FAILURES",
    "LOAD_LATENCY",
    "PARTITIONS_LOADED",
    "RECORDS_SKIPPED",
    "SEARCH_LATENCY",
    "JsonFormatter",
    "bind_partition",
    "configure_logging",
    "create_span",
    "get_metrics",
    "get_trace_context",
    "get_tracer",
    "init_metrics",
    "init_tracing",
    "trace_context",
    "track_latency",
]
