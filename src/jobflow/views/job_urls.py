"""Job URL management view."""

from typing import Any, Iterable, Mapping, Optional

from rich.table import Table

from jobflow.models.job import JobUrl
from jobflow.services.job_urls import JobUrlService
from jobflow.utils.forms import FormValidationError
from jobflow.utils.http_client import HttpError, NetworkError
from jobflow.utils.logger import get_logger
from jobflow.utils.notifier import Notifier
from jobflow.utils.rate_limiter import TabOpener
from jobflow.views.layout import (
    empty_panel,
    error_panel,
    is_compact,
    matches_search,
    matches_status,
    status_badge,
)
from jobflow.views.selection import Selection


def filter_job_urls(
    urls: Iterable[JobUrl], search: str = "", status: Optional[str] = None
) -> list[JobUrl]:
    """Search company, title and URL; optionally keep a single status."""
    return [
        u
        for u in urls
        if matches_search(search, u.company, u.title, u.url)
        and matches_status(status, u.status)
    ]


def build_job_url_table(
    urls: list[JobUrl], selection: Optional[Selection] = None, compact: bool = False
) -> Table:
    selected = len(selection) if selection is not None else 0
    table = Table(
        title=f"Job URLs ({len(urls)} URLs, {selected} selected)",
        show_lines=compact,
    )
    table.add_column("", width=3)
    table.add_column("ID", style="dim")
    if compact:
        table.add_column("Job")
    else:
        table.add_column("Company")
        table.add_column("Title")
        table.add_column("URL", overflow="fold")
        table.add_column("Added")
    table.add_column("Status")

    for u in urls:
        mark = "[x]" if selection is not None and u.id in selection else "[ ]"
        title = u.title or u.position or "Untitled position"
        company = u.company or "Unknown company"
        if compact:
            table.add_row(mark, u.id, f"{title}\n[dim]{company}[/dim]", status_badge(u.status))
        else:
            table.add_row(
                mark, u.id, company, title, u.url, u.created_at[:10], status_badge(u.status)
            )
    return table


class JobUrlsView:
    """Lists, adds, deletes and opens saved job URLs."""

    def __init__(
        self,
        service: JobUrlService,
        notifier: Notifier,
        opener: Optional[TabOpener] = None,
        correlation_id: Optional[str] = None,
    ):
        self.service = service
        self.notifier = notifier
        self.console = notifier.console
        self.opener = opener or TabOpener()
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="job_urls", component="job_urls_view"
        )

    async def show(
        self,
        search: str = "",
        status: Optional[str] = None,
        selection: Optional[Selection] = None,
    ) -> bool:
        """Print the filtered list, or an error panel if the list failed to load."""
        try:
            urls = await self.service.list()
        except (HttpError, NetworkError) as e:
            self.logger.error("Failed to load job URLs", error=str(e))
            self.console.print(error_panel(e, "Failed to load job URLs"))
            return False

        filtered = filter_job_urls(urls, search, status)
        if not filtered:
            hint = "Try a different search." if urls else "Add one with: jobflow urls add <url>"
            self.console.print(empty_panel("No job URLs found", hint))
            return True

        self.console.print(
            build_job_url_table(filtered, selection, compact=is_compact(self.console))
        )
        return True

    async def add(self, values: Mapping[str, Any]) -> bool:
        try:
            await self.service.add(values)
        except FormValidationError as e:
            self.notifier.error("Invalid job URL", "; ".join(e.field_errors.values()))
            return False
        except (HttpError, NetworkError) as e:
            self.notifier.error("Failed to add job URL", str(e))
            return False
        self.notifier.success("Success", "Job URL added successfully")
        return True

    async def delete(self, ids: Iterable[str]) -> int:
        """Delete each id; returns how many were removed."""
        deleted = 0
        for job_url_id in ids:
            try:
                await self.service.delete(job_url_id)
            except (HttpError, NetworkError) as e:
                self.logger.error("Delete failed", job_url_id=job_url_id, error=str(e))
                self.notifier.error("Error", "Failed to delete job URL")
                continue
            deleted += 1
        if deleted:
            self.notifier.success("Success", f"Deleted {deleted} job URL(s)")
        return deleted

    async def open_selected(self, selection: Selection) -> int:
        """Open the selected URLs one per second."""
        if not selection:
            self.notifier.error(
                "No URLs selected", "Please select at least one URL to autofill"
            )
            return 0
        try:
            urls = await self.service.list()
        except (HttpError, NetworkError) as e:
            self.notifier.error("Failed to load job URLs", str(e))
            return 0

        targets = [u.url for u in urls if u.id in selection]
        self.notifier.success("Opening job URLs", f"Opening {len(targets)} URL(s) in new tabs")
        return await self.opener.open_all(targets)
