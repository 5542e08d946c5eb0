"""Job search and discovered listings view."""

import math
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from rich.table import Table

from jobflow.models.job import JobListing
from jobflow.services.discovery import DiscoveryResult, JobDiscoveryService
from jobflow.utils.extension_bridge import ExtensionBridge
from jobflow.utils.forms import FormValidationError
from jobflow.utils.http_client import HttpError, NetworkError
from jobflow.utils.local_storage import AUTO_APPLY_JOBS_KEY, LocalStorage
from jobflow.utils.logger import get_logger
from jobflow.utils.notifier import Notifier
from jobflow.utils.rate_limiter import TabOpener
from jobflow.views.layout import empty_panel, is_compact
from jobflow.views.selection import Selection

SECONDS_PER_DAY = 24 * 60 * 60


def _parse_date(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_posted_date(value: str, now: Optional[datetime] = None) -> str:
    """Relative age for postings under a week old, the date otherwise.

    Partial days round up, so a posting from this morning is "1 day ago".
    Unparseable values are returned unchanged.
    """
    try:
        posted = _parse_date(value)
    except ValueError:
        return value
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    diff_days = math.ceil(abs((now - posted).total_seconds()) / SECONDS_PER_DAY)
    if diff_days == 1:
        return "1 day ago"
    if diff_days < 7:
        return f"{diff_days} days ago"
    return f"{posted.month}/{posted.day}/{posted.year}"


def build_listings_table(
    jobs: list[JobListing],
    selection: Optional[Selection] = None,
    compact: bool = False,
    now: Optional[datetime] = None,
) -> Table:
    selected = len(selection) if selection is not None else 0
    table = Table(title=f"{len(jobs)} jobs found - {selected} selected", show_lines=compact)
    table.add_column("", width=3)
    table.add_column("ID", style="dim")
    table.add_column("Job")
    if not compact:
        table.add_column("Location")
        table.add_column("Salary")
        table.add_column("Source")
    table.add_column("Posted")

    for job in jobs:
        mark = "[x]" if selection is not None and job.id in selection else "[ ]"
        heading = f"[bold]{job.title}[/bold]\n{job.company}"
        posted = format_posted_date(job.posted_date, now) if job.posted_date else ""
        if compact:
            table.add_row(mark, job.id, heading, posted)
        else:
            table.add_row(
                mark, job.id, heading, job.location, job.salary or "", job.source, posted
            )
    return table


class ListingsView:
    """Runs searches, shows the stored results and starts auto-apply."""

    def __init__(
        self,
        discovery: JobDiscoveryService,
        storage: LocalStorage,
        bridge: ExtensionBridge,
        notifier: Notifier,
        opener: Optional[TabOpener] = None,
        correlation_id: Optional[str] = None,
    ):
        self.discovery = discovery
        self.storage = storage
        self.bridge = bridge
        self.notifier = notifier
        self.console = notifier.console
        self.opener = opener or TabOpener()
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="listings", component="listings_view"
        )

    async def search(self, values: Mapping[str, Any]) -> Optional[DiscoveryResult]:
        try:
            with self.notifier.busy("Searching for jobs..."):
                result = await self.discovery.discover(values)
        except FormValidationError as e:
            self.notifier.error("Invalid search", "; ".join(e.field_errors.values()))
            return None
        except NetworkError as e:
            self.logger.error("Job search failed", error=str(e))
            self.notifier.error("Search failed", e.message)
            return None
        except HttpError as e:
            self.logger.error("Job search failed", status=e.status, error=str(e))
            self.notifier.error("Search failed", "Please try again later.")
            return None

        self.notifier.success("Jobs found!", f"{result.count} jobs discovered")
        return result

    def show(self, selection: Optional[Selection] = None) -> bool:
        jobs = self.discovery.discovered_jobs()
        if not jobs:
            self.console.print(
                empty_panel("No job listings yet", "Run: jobflow search --title ... --location ...")
            )
            return True
        self.console.print(
            build_listings_table(jobs, selection, compact=is_compact(self.console))
        )
        return True

    async def auto_apply(self, selection: Iterable[str]) -> int:
        """Hand the selected jobs to the extension and open their links.

        Returns:
            Number of job links opened
        """
        selected_ids = set(str(i) for i in selection)
        if not selected_ids:
            self.notifier.error(
                "No jobs selected", "Please select at least one job to apply to"
            )
            return 0

        jobs = [j for j in self.discovery.discovered_jobs() if j.id in selected_ids]
        if not jobs:
            self.notifier.error("No jobs selected", "None of the selected jobs were found")
            return 0

        payload = [job.to_wire() for job in jobs]
        try:
            self.storage.set_json(AUTO_APPLY_JOBS_KEY, payload)
            self.bridge.send_message("autoApplyJobs", {"jobs": payload})
        except OSError as e:
            self.logger.error("Auto apply failed", error=str(e))
            self.notifier.error("Error", "Failed to initiate auto apply")
            return 0

        self.notifier.success(
            "Auto Apply Initiated", f"Opening {len(jobs)} job applications in new tabs"
        )
        return await self.opener.open_all(job.url for job in jobs)
