"""
Prometheus metrics for the governance query gateway.

All metrics are exposed via the /metrics endpoint.
"""

from collections.abc import Sequence
from typing import Any, TypeVar, cast

from prometheus_client import REGISTRY, Counter, Gauge, Histogram

MetricType = Counter | Gauge | Histogram
T = TypeVar("T", bound=MetricType)


def get_metric(
    name: str,
    type_cls: type[T],
    documentation: str,
    labelnames: Sequence[str] = (),
    buckets: Sequence[float] | None = None,
) -> T:
    """
    Get an existing metric or create a new one.
    This prevents 'Duplicated timeseries' errors when reloading modules or running tests.
    """
    if name in REGISTRY._names_to_collectors:
        return cast("T", REGISTRY._names_to_collectors[name])

    kwargs = {}
    if buckets and type_cls is Histogram:
        kwargs["buckets"] = buckets
    return cast("T", type_cls(name, documentation, labelnames, **cast("Any", kwargs)))


# === Request Metrics ===

request_counter = get_metric(
    "gateway_requests_total",
    Counter,
    "Total number of governance requests handled",
    ["route", "status"],  # status=success, error, connection_error
)

latency_histogram = get_metric(
    "gateway_request_latency_seconds",
    Histogram,
    "End-to-end request latency",
    ["route"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

# === Store Metrics ===

store_connection_counter = get_metric(
    "gateway_store_connections_total",
    Counter,
    "Connection attempts against the document store",
    ["result"],  # success, failure
)

store_connected_gauge = get_metric(
    "gateway_store_connected",
    Gauge,
    "1 while the document store client is connected",
)

query_duration_histogram = get_metric(
    "gateway_query_duration_seconds",
    Histogram,
    "Duration of document store queries",
    ["collection", "operation"],  # operation=find/find_one
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5],
)

documents_returned_histogram = get_metric(
    "gateway_documents_returned",
    Histogram,
    "Number of documents returned per query",
    ["collection"],
    buckets=[0, 1, 5, 10, 25, 50, 100, 500],
)

# === Error Metrics ===

error_counter = get_metric(
    "gateway_errors_total",
    Counter,
    "Total number of errors by type",
    ["error_type"],  # connection, query
)
