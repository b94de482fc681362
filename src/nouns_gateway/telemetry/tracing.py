"""
Tracing for the governance gateway.

Spans are exported over OTLP/gRPC once `setup_tracing` has installed a
provider. Until then every tracer is a no-op proxy, so `store_span` is safe to
use unconditionally.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import logging
from threading import Lock
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, SpanKind

from nouns_gateway.enums import ServiceEndpoint


if TYPE_CHECKING:
    from fastapi import FastAPI

    from nouns_gateway.config import GatewaySettings

logger = logging.getLogger(__name__)

DB_SYSTEM = "mongodb"
UNTRACED_URLS = ",".join((ServiceEndpoint.METRICS.value, ServiceEndpoint.HEALTH.value))

_setup_lock = Lock()
_store_tracer = trace.get_tracer("nouns_gateway.store")


class _TracingState:
    configured: bool = False


_tracing_state = _TracingState()


def _gateway_resource(settings: GatewaySettings, service_name: str) -> Resource:
    return Resource.create(
        {
            SERVICE_NAME: service_name,
            "service.namespace": "nouns-governance",
            "db.system": DB_SYSTEM,
            "gateway.database": settings.mongodb_database,
            "gateway.base_path": settings.api_base_path or "/",
        }
    )


def setup_tracing(settings: GatewaySettings, service_name: str) -> bool:
    """
    Install the process-wide tracer provider when ENABLE_TRACING is set.

    Runs at most once. When the OTLP exporter cannot be built, tracing is left
    off and the gateway keeps serving.

    Returns:
        bool: Whether a provider is installed
    """
    if not settings.enable_tracing:
        return False

    with _setup_lock:
        if _tracing_state.configured:
            return True

        try:
            exporter = OTLPSpanExporter(
                endpoint=settings.otel_exporter_endpoint,
                insecure=settings.otel_exporter_insecure,
                timeout=5,
            )
        except Exception as exc:
            logger.warning("Tracing disabled, OTLP exporter unavailable: %s", exc)
            return False

        provider = TracerProvider(resource=_gateway_resource(settings, service_name))
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)

        _tracing_state.configured = True
        logger.info(
            "Exporting spans for %s to %s", service_name, settings.otel_exporter_endpoint
        )
        return True


def instrument_fastapi_app(app: FastAPI) -> None:
    """Trace incoming requests, except the operational endpoints."""
    try:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=UNTRACED_URLS)
    except Exception as exc:
        logger.warning("Unable to instrument FastAPI app for tracing: %s", exc)


@contextmanager
def store_span(collection: str, operation: str, **attributes: Any) -> Iterator[Span]:
    """
    Client span around one document store read.

    Named `<operation> <collection>`. Extra keyword attributes are recorded
    under the `gateway.` prefix. An exception escaping the block is recorded
    on the span and re-raised.
    """
    span_attributes: dict[str, Any] = {
        "db.system": DB_SYSTEM,
        "db.collection.name": collection,
        "db.operation.name": operation,
    }
    span_attributes.update({f"gateway.{key}": value for key, value in attributes.items()})

    with _store_tracer.start_as_current_span(
        f"{operation} {collection}",
        kind=SpanKind.CLIENT,
        attributes=span_attributes,
    ) as span:
        yield span
