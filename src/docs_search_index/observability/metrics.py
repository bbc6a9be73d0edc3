"""Prometheus metrics for index loading and queries, mirrored to OpenTelemetry."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING, Any

from opentelemetry import metrics as otel_metrics
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.resources import Resource
from prometheus_client import Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


_meter_holder: dict[str, Any] = {"meter": None, "provider": None}


def init_metrics(
    service_name: str = "docs-search-index",
    resource_attributes: dict[str, str] | None = None,
) -> MeterProvider:
    """Initialize OpenTelemetry metrics."""
    provider = _meter_holder.get("provider")
    if isinstance(provider, MeterProvider):
        return provider

    attributes = {"service.name": service_name}
    if resource_attributes:
        attributes.update(resource_attributes)
    provider = MeterProvider(resource=Resource.create(attributes))
    otel_metrics.set_meter_provider(provider)
    _meter_holder["provider"] = provider
    _meter_holder["meter"] = otel_metrics.get_meter(__name__)
    return provider


def _get_meter():
    meter = _meter_holder.get("meter")
    if meter is None:
        init_metrics()
        meter = _meter_holder.get("meter")
    return meter


class _BoundMetric:
    def __init__(self, wrapper: MetricBridge, labels: dict[str, str]) -> None:
        self._wrapper = wrapper
        self._labels = labels

    def inc(self, amount: float = 1.0) -> None:
        self._wrapper.inc(self._labels, amount)

    def observe(self, value: float) -> None:
        self._wrapper.observe(self._labels, value)

    def set(self, value: float) -> None:
        self._wrapper.set(self._labels, value)


class MetricBridge:
    """Bridge a Prometheus metric to the matching OTel instrument."""

    def __init__(
        self,
        prom_metric: Counter | Histogram | Gauge,
        *,
        otel_name: str,
        otel_description: str,
        otel_kind: str,
    ) -> None:
        self._prom_metric = prom_metric
        self._otel_name = otel_name
        self._otel_description = otel_description
        self._otel_kind = otel_kind
        self._otel_instrument = None
        self._last_values: dict[tuple[tuple[str, str], ...], float] = {}

    def labels(self, **labels: str) -> _BoundMetric:
        return _BoundMetric(self, labels)

    def _ensure_otel_instrument(self):
        if self._otel_instrument is not None:
            return self._otel_instrument
        meter = _get_meter()
        if self._otel_kind == "counter":
            self._otel_instrument = meter.create_counter(self._otel_name, description=self._otel_description)
        elif self._otel_kind == "histogram":
            self._otel_instrument = meter.create_histogram(self._otel_name, description=self._otel_description)
        elif self._otel_kind == "gauge":
            self._otel_instrument = meter.create_up_down_counter(self._otel_name, description=self._otel_description)
        else:
            raise ValueError(f"Unknown metric kind: {self._otel_kind}")
        return self._otel_instrument

    def inc(self, labels: dict[str, str], amount: float) -> None:
        self._prom_metric.labels(**labels).inc(amount)
        self._ensure_otel_instrument().add(amount, labels)

    def observe(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).observe(value)
        self._ensure_otel_instrument().record(value, labels)

    def set(self, labels: dict[str, str], value: float) -> None:
        self._prom_metric.labels(**labels).set(value)
        key = tuple(sorted(labels.items()))
        delta = value - self._last_values.get(key, 0.0)
        if delta:
            self._ensure_otel_instrument().add(delta, labels)
        self._last_values[key] = value


_PARTITIONS_LOADED_PROM = Counter(
    "search_index_partitions_loaded_total",
    "Partitions decoded into the search index",
    ["section"],
)

_RECORDS_SKIPPED_PROM = Counter(
    "search_index_records_skipped_total",
    "Malformed partition records skipped during decoding",
    ["section"],
)

_LOAD_FAILURES_PROM = Counter(
    "search_index_load_failures_total",
    "Index loads aborted by an unreadable or malformed partition",
    ["reason"],
)

_LOAD_LATENCY_PROM = Histogram(
    "search_index_load_seconds",
    "Time spent building the search index",
    ["stage"],
    buckets=(0.005, 0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0),
)

_SEARCH_LATENCY_PROM = Histogram(
    "search_index_query_seconds",
    "Keyword query latency",
    ["mode"],
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1),
)

_INDEX_SIZE_PROM = Gauge(
    "search_index_size",
    "Size of the published search index",
    ["kind"],
)

PARTITIONS_LOADED = MetricBridge(
    _PARTITIONS_LOADED_PROM,
    otel_name="search_index_partitions_loaded_total",
    otel_description="Partitions decoded into the search index",
    otel_kind="counter",
)

RECORDS_SKIPPED = MetricBridge(
    _RECORDS_SKIPPED_PROM,
    otel_name="search_index_records_skipped_total",
    otel_description="Malformed partition records skipped during decoding",
    otel_kind="counter",
)

LOAD_FAILURES = MetricBridge(
    _LOAD_FAILURES_PROM,
    otel_name="search_index_load_failures_total",
    otel_description="Index loads aborted by an unreadable or malformed partition",
    otel_kind="counter",
)

LOAD_LATENCY = MetricBridge(
    _LOAD_LATENCY_PROM,
    otel_name="search_index_load_seconds",
    otel_description="Time spent building the search index",
    otel_kind="histogram",
)

SEARCH_LATENCY = MetricBridge(
    _SEARCH_LATENCY_PROM,
    otel_name="search_index_query_seconds",
    otel_description="Keyword query latency",
    otel_kind="histogram",
)

INDEX_SIZE = MetricBridge(
    _INDEX_SIZE_PROM,
    otel_name="search_index_size",
    otel_description="Size of the published search index",
    otel_kind="gauge",
)


@contextmanager
def track_latency(histogram: MetricBridge, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()
