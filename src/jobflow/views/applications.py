"""Applications view."""

from typing import Any, Iterable, Optional

from rich.table import Table

from jobflow.models.application import Application
from jobflow.services.applications import ApplicationService
from jobflow.utils.http_client import HttpError, NetworkError
from jobflow.utils.logger import get_logger
from jobflow.utils.notifier import Notifier
from jobflow.views.layout import (
    empty_panel,
    error_panel,
    is_compact,
    matches_search,
    matches_status,
    status_badge,
)


def filter_applications(
    applications: Iterable[Application], search: str = "", status: Optional[str] = None
) -> list[Application]:
    return [
        a
        for a in applications
        if matches_search(search, a.company, a.position)
        and matches_status(status, a.status)
    ]


def build_applications_table(
    applications: list[Application], compact: bool = False, title: str = "Applications"
) -> Table:
    table = Table(title=f"{title} ({len(applications)})")
    table.add_column("Company")
    table.add_column("Position")
    if not compact:
        table.add_column("Applied")
        table.add_column("Type")
    table.add_column("Status")

    for a in applications:
        company = a.company or "Unknown company"
        position = a.position or "Unknown position"
        if compact:
            table.add_row(company, position, status_badge(a.status))
        else:
            job_type = " / ".join(t for t in (a.job_type, a.work_type) if t)
            table.add_row(
                company, position, a.applied_date[:10], job_type, status_badge(a.status)
            )
    return table


class ApplicationsView:
    def __init__(
        self,
        service: ApplicationService,
        notifier: Notifier,
        correlation_id: Optional[str] = None,
    ):
        self.service = service
        self.console = notifier.console
        self.logger: Any = get_logger(
            correlation_id=correlation_id,
            view="applications",
            component="applications_view",
        )

    async def show(self, search: str = "", status: Optional[str] = None) -> bool:
        try:
            applications = await self.service.list()
        except (HttpError, NetworkError) as e:
            self.logger.error("Failed to load applications", error=str(e))
            self.console.print(error_panel(e, "Failed to load applications"))
            return False

        filtered = filter_applications(applications, search, status)
        if not filtered:
            self.console.print(
                empty_panel(
                    "No applications found",
                    "Applications submitted through the extension appear here.",
                )
            )
            return True

        self.console.print(
            build_applications_table(filtered, compact=is_compact(self.console))
        )
        return True
