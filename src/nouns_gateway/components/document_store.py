"""
Document store connection management.

Owns the single MongoDB client of the process. The client is built lazily on
the first request and shared by every request after that.
"""

import asyncio
from collections.abc import Callable
import logging
from typing import Any

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from ..config import GatewaySettings
from ..telemetry import metrics

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., Any]


class StoreError(Exception):
    """Base exception for document store errors."""


class StoreConnectionError(StoreError):
    """Raised when the store cannot be reached or the client cannot be built."""


class StoreNotConnectedError(StoreError):
    """Raised when the database handle is requested before a successful connect."""


class DocumentStore:
    """
    Lazily connected, process-scoped handle to the governance database.

    Concurrent callers of `connect()` share one in-flight attempt: the client
    factory and the connectivity ping run at most once per successful
    connection. A failed attempt leaves the store disconnected so the next
    caller retries.
    """

    def __init__(
        self,
        settings: GatewaySettings,
        client_factory: ClientFactory | None = None,
    ) -> None:
        """
        Initialize the document store.

        Args:
            settings: Gateway configuration holding the connection string
            client_factory: Callable building the driver client, AsyncMongoClient by default
        """
        self.settings = settings
        self._client_factory: ClientFactory = client_factory or AsyncMongoClient
        self._client: Any | None = None
        self._database: AsyncDatabase | None = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._database is not None

    @property
    def database(self) -> AsyncDatabase:
        if self._database is None:
            raise StoreNotConnectedError("Document store is not connected")
        return self._database

    async def connect(self) -> AsyncDatabase:
        """
        Return the connected database, connecting first if needed.

        Raises:
            StoreConnectionError: If the client cannot be built or the server does not answer
        """
        if self._database is not None:
            return self._database

        async with self._lock:
            # Another task may have finished connecting while we waited
            if self._database is not None:
                return self._database

            logger.info(
                "Connecting to document store (database=%s)", self.settings.mongodb_database
            )
            client = None
            try:
                client = self._client_factory(
                    self.settings.mongodb_uri,
                    serverSelectionTimeoutMS=self.settings.mongodb_server_selection_timeout_ms,
                    appname="nouns-gateway",
                )
                database = client[self.settings.mongodb_database]
                await database.command("ping")
            except PyMongoError as e:
                metrics.store_connection_counter.labels(result="failure").inc()
                if client is not None:
                    await self._close_client(client)
                raise StoreConnectionError(f"Failed to connect to document store: {e}") from e

            self._client = client
            self._database = database
            metrics.store_connection_counter.labels(result="success").inc()
            metrics.store_connected_gauge.set(1)
            logger.info("Connected to document store")
            return database

    async def ping(self) -> bool:
        """Check store reachability without raising."""
        try:
            database = await self.connect()
            await database.command("ping")
        except (StoreError, PyMongoError) as e:
            logger.warning("Document store ping failed: %s", e)
            return False
        return True

    async def close(self) -> None:
        """Close the client. Safe to call when never connected."""
        async with self._lock:
            client = self._client
            self._client = None
            self._database = None
            if client is None:
                return
            await self._close_client(client)
            metrics.store_connected_gauge.set(0)
            logger.info("Document store connection closed")

    async def _close_client(self, client: Any) -> None:
        try:
            await client.close()
        except PyMongoError:
            logger.exception("Error closing document store client")
