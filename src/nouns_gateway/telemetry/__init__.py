"""
Telemetry utilities for the governance query gateway.
"""

from .metrics import (
    documents_returned_histogram,
    error_counter,
    latency_histogram,
    query_duration_histogram,
    request_counter,
    store_connected_gauge,
    store_connection_counter,
)
from .tracing import instrument_fastapi_app, setup_tracing, store_span


__all__ = [
    "documents_returned_histogram",
    "error_counter",
    "instrument_fastapi_app",
    "latency_histogram",
    "query_duration_histogram",
    "request_counter",
    "setup_tracing",
    "store_connected_gauge",
    "store_connection_counter",
    "store_span",
]
