import logging
import time

from starlette.responses import PlainTextResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .components.document_store import StoreError
from .telemetry import metrics


logger = logging.getLogger(__name__)

CONNECTION_ERROR_BODY = "Database connection error"

# Route label for requests that never reached a matched route
UNMATCHED_ROUTE = "unmatched"


class StoreConnectionMiddleware:
    """
    Middleware ensuring the document store is connected before a governance
    route runs.

    Only paths under `base_path` are guarded, minus `excluded_paths`. The store
    is read from `app.state.document_store`. A failed connect answers 500 with
    a plain-text body and never reaches the route.
    """

    def __init__(
        self,
        app: ASGIApp,
        base_path: str = "",
        excluded_paths: tuple[str, ...] = (),
    ) -> None:
        self.app = app
        self.base_path = base_path
        self.excluded_paths = excluded_paths

    def _is_guarded(self, path: str) -> bool:
        if path in self.excluded_paths:
            return False
        if not self.base_path:
            return True
        return path == self.base_path or path.startswith(self.base_path + "/")

    def _create_status_send_wrapper(self, send: Send, status_holder: list[int]) -> Send:
        """Create a send wrapper that records the response status."""

        async def send_wrapper(message: Message) -> None:
            if message["type"] == "http.response.start":
                status_holder.append(message["status"])
            await send(message)

        return send_wrapper

    @staticmethod
    def _route_label(scope: Scope) -> str:
        route = scope.get("route")
        return getattr(route, "path_format", None) or UNMATCHED_ROUTE

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not self._is_guarded(scope["path"]):
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        store = scope["app"].state.document_store

        try:
            await store.connect()
        except StoreError:
            logger.exception("Failed to connect to document store")
            metrics.error_counter.labels(error_type="connection").inc()
            metrics.request_counter.labels(
                route=UNMATCHED_ROUTE, status="connection_error"
            ).inc()
            response = PlainTextResponse(CONNECTION_ERROR_BODY, status_code=500)
            await response(scope, receive, send)
            return

        status_holder: list[int] = []
        try:
            await self.app(scope, receive, self._create_status_send_wrapper(send, status_holder))
        finally:
            route = self._route_label(scope)
            metrics.latency_histogram.labels(route=route).observe(time.perf_counter() - start_time)
            status_code = status_holder[0] if status_holder else 500
            metrics.request_counter.labels(
                route=route, status="success" if status_code < 500 else "error"
            ).inc()
