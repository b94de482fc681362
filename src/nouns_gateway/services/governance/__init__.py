"""
Governance query service.

The router lives in `.api`; import it from there.
"""

from .repository import GovernanceRepository
from .schemas import HealthResponse, Pagination, QuerySpec


__all__ = ["GovernanceRepository", "HealthResponse", "Pagination", "QuerySpec"]
