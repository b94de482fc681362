"""
Schemas for governance queries and the operational endpoints.
"""

from dataclasses import dataclass, field
from typing import Any

from pydantic import Field

from nouns_gateway.base_schemas import BaseJSONModel
from nouns_gateway.enums import CollectionName


@dataclass(frozen=True)
class Pagination:
    """Sanitized page window. `page` and `limit` are always >= 1."""

    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class QuerySpec:
    """
    A single read against one collection.

    `limit=0` means no limit, matching the driver's convention.
    """

    collection: CollectionName
    filter: dict[str, Any] = field(default_factory=dict)
    projection: dict[str, int] = field(default_factory=dict)
    sort: list[tuple[str, int]] = field(default_factory=list)
    skip: int = 0
    limit: int = 0


class HealthResponse(BaseJSONModel):
    """Response from the /health endpoint."""

    status: str = Field(..., description="'healthy' or 'degraded'")
    database: str = Field(..., description="'connected' or 'unavailable'")
    version: str = Field(..., description="Gateway version")
