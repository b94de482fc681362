"""
Read-only execution of governance QuerySpecs against the document store.
"""

import logging
import time
from typing import Any

from pymongo.asynchronous.database import AsyncDatabase

from nouns_gateway.telemetry import metrics, store_span

from .schemas import QuerySpec

logger = logging.getLogger(__name__)


class GovernanceRepository:
    """Runs `find` and `find_one` reads. Never writes."""

    def __init__(self, database: AsyncDatabase) -> None:
        self.database = database

    async def find_many(self, spec: QuerySpec) -> list[dict[str, Any]]:
        collection = spec.collection.value
        start_time = time.perf_counter()

        with store_span(collection, "find", skip=spec.skip, limit=spec.limit):
            cursor = self.database[collection].find(spec.filter, spec.projection)
            if spec.sort:
                cursor = cursor.sort(spec.sort)
            if spec.skip:
                cursor = cursor.skip(spec.skip)
            if spec.limit:
                cursor = cursor.limit(spec.limit)
            documents: list[dict[str, Any]] = await cursor.to_list(None)

        elapsed = time.perf_counter() - start_time
        metrics.query_duration_histogram.labels(collection=collection, operation="find").observe(
            elapsed
        )
        metrics.documents_returned_histogram.labels(collection=collection).observe(len(documents))
        logger.debug(
            "find %s filter=%s skip=%d limit=%d -> %d documents in %.3fs",
            collection,
            spec.filter,
            spec.skip,
            spec.limit,
            len(documents),
            elapsed,
        )
        return documents

    async def find_one(self, spec: QuerySpec) -> dict[str, Any] | None:
        collection = spec.collection.value
        start_time = time.perf_counter()

        with store_span(collection, "find_one"):
            document: dict[str, Any] | None = await self.database[collection].find_one(
                spec.filter,
                spec.projection,
                sort=spec.sort or None,
            )

        elapsed = time.perf_counter() - start_time
        metrics.query_duration_histogram.labels(
            collection=collection, operation="find_one"
        ).observe(elapsed)
        metrics.documents_returned_histogram.labels(collection=collection).observe(
            0 if document is None else 1
        )
        logger.debug(
            "find_one %s filter=%s -> %s in %.3fs",
            collection,
            spec.filter,
            "hit" if document is not None else "miss",
            elapsed,
        )
        return document
