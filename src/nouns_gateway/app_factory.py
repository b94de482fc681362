"""
Application factory for the governance query gateway.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import generate_latest
from pymongo.errors import PyMongoError

from . import __version__
from .components.document_store import ClientFactory, DocumentStore
from .config import GatewaySettings, get_settings
from .dependencies import get_document_store
from .enums import ServiceEndpoint
from .middleware import StoreConnectionMiddleware
from .services.governance.api import router as governance_router
from .services.governance.schemas import HealthResponse
from .telemetry import instrument_fastapi_app, metrics


logger = logging.getLogger(__name__)

operational_router = APIRouter(tags=["operational"])


@operational_router.get(ServiceEndpoint.HEALTH.value)
async def health(
    store: Annotated[DocumentStore, Depends(get_document_store)],
) -> HealthResponse:
    """Health check endpoint. Reports degraded while the store is unreachable."""
    reachable = await store.ping()
    return HealthResponse(
        status="healthy" if reachable else "degraded",
        database="connected" if reachable else "unavailable",
        version=__version__,
    )


@operational_router.get(ServiceEndpoint.METRICS.value, response_class=Response)
@operational_router.head(ServiceEndpoint.METRICS.value, response_class=Response)
async def prometheus_metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )


async def store_query_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Turn a failed store read into a generic 500."""
    logger.error("Document store query failed on %s: %s", request.url.path, exc)
    metrics.error_counter.labels(error_type="query").inc()
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(
    settings: GatewaySettings | None = None,
    client_factory: ClientFactory | None = None,
) -> FastAPI:
    """
    Build the gateway application.

    The document store is constructed here, once per app, and closed by the
    lifespan on shutdown. It connects on the first governance request.

    Args:
        settings: Gateway configuration, the global settings when omitted
        client_factory: Optional replacement for the MongoDB client constructor

    Returns:
        FastAPI: The configured application
    """
    settings = settings or get_settings()
    store = DocumentStore(settings, client_factory=client_factory)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Starting governance gateway...")
        yield
        logger.info("Stopping governance gateway...")
        await store.close()
        logger.info("Governance gateway stopped")

    app = FastAPI(
        title="Nouns Governance Gateway",
        description="Read-only query API over mirrored governance events",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.document_store = store

    app.add_middleware(
        StoreConnectionMiddleware,
        base_path=settings.api_base_path,
        excluded_paths=(ServiceEndpoint.HEALTH.value, ServiceEndpoint.METRICS.value),
    )
    app.add_exception_handler(PyMongoError, store_query_error_handler)

    app.include_router(operational_router)
    app.include_router(governance_router, prefix=settings.api_base_path)

    if settings.enable_tracing:
        instrument_fastapi_app(app)

    logger.info(
        "Governance routes mounted at '%s' (database=%s)",
        settings.api_base_path or "/",
        settings.mongodb_database,
    )
    return app
