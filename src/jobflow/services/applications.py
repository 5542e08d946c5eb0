"""Read-only application list and dashboard counters."""

from __future__ import annotations

from typing import Any, Optional

from jobflow.models.application import Application, DashboardStats
from jobflow.services import keys
from jobflow.utils.http_client import parse_model, parse_models
from jobflow.utils.logger import get_logger
from jobflow.utils.query_client import QueryClient


class ApplicationService:
    """Reads for /api/applications."""

    def __init__(self, queries: QueryClient, correlation_id: Optional[str] = None):
        self.queries = queries
        self.logger: Any = get_logger(
            correlation_id=correlation_id,
            view="applications",
            component="application_service",
        )

    async def list(self) -> list[Application]:
        data = await self.queries.fetch_query(keys.APPLICATIONS)
        applications = parse_models(Application, data, keys.APPLICATIONS)
        self.logger.debug("Applications loaded", count=len(applications))
        return applications

    async def recent(self, limit: int = 5) -> list[Application]:
        """Most recently applied first."""
        applications = await self.list()
        return sorted(applications, key=lambda a: a.applied_date, reverse=True)[:limit]


class StatsService:
    """Reads for /api/stats."""

    def __init__(self, queries: QueryClient):
        self.queries = queries

    async def get(self) -> DashboardStats:
        data = await self.queries.fetch_query(keys.STATS)
        return parse_model(DashboardStats, data or {}, keys.STATS)
