"""Settings panel: local settings, data export, clearing local data."""

import csv
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal, Mapping, Optional

from rich.table import Table

from jobflow.models.application import Application
from jobflow.models.job import JobUrl
from jobflow.services.applications import ApplicationService
from jobflow.services.job_urls import JobUrlService
from jobflow.services.settings import SettingsStore
from jobflow.utils.forms import FormValidationError
from jobflow.utils.http_client import HttpError, NetworkError
from jobflow.utils.logger import get_logger
from jobflow.utils.notifier import Notifier

ExportFormat = Literal["json", "csv"]

CSV_COLUMNS = ["type", "id", "company", "title", "url", "status", "date"]


def export_rows(job_urls: list[JobUrl], applications: list[Application]) -> list[dict[str, str]]:
    """Flatten job URLs and applications into one CSV-friendly row list."""
    rows = []
    for u in job_urls:
        rows.append(
            {
                "type": "job_url",
                "id": u.id,
                "company": u.company or "",
                "title": u.title or u.position or "",
                "url": u.url,
                "status": u.status,
                "date": u.created_at,
            }
        )
    for a in applications:
        rows.append(
            {
                "type": "application",
                "id": a.id,
                "company": a.company or "",
                "title": a.position or "",
                "url": "",
                "status": a.status,
                "date": a.applied_date,
            }
        )
    return rows


class SettingsView:
    def __init__(
        self,
        store: SettingsStore,
        job_urls: JobUrlService,
        applications: ApplicationService,
        notifier: Notifier,
        correlation_id: Optional[str] = None,
    ):
        self.store = store
        self.job_urls = job_urls
        self.applications = applications
        self.notifier = notifier
        self.console = notifier.console
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="settings", component="settings_view"
        )

    def show(self) -> bool:
        settings = self.store.load()
        table = Table(title="Settings")
        table.add_column("Setting")
        table.add_column("Value")
        for name, value in settings.to_wire().items():
            table.add_row(name, str(value))
        self.console.print(table)
        return True

    def set(self, changes: Mapping[str, Any]) -> bool:
        try:
            self.store.update(**changes)
        except KeyError as e:
            self.notifier.error("Unknown setting", str(e.args[0]))
            return False
        except FormValidationError as e:
            self.notifier.error("Invalid settings", "; ".join(e.field_errors.values()))
            return False
        self.notifier.success("Settings saved", "Your preferences have been updated successfully")
        return True

    async def export(self, fmt: ExportFormat, destination: Path) -> Optional[Path]:
        """Write job URLs and applications to a JSON or CSV file."""
        try:
            job_urls = await self.job_urls.list()
            applications = await self.applications.list()
        except (HttpError, NetworkError) as e:
            self.notifier.error("Export failed", str(e))
            return None

        destination = Path(destination)
        destination.parent.mkdir(parents=True, exist_ok=True)
        if fmt == "json":
            document = {
                "exportedAt": datetime.now(timezone.utc).isoformat(),
                "settings": self.store.load().to_wire(),
                "jobUrls": [u.to_wire() for u in job_urls],
                "applications": [a.to_wire() for a in applications],
            }
            with open(destination, "w") as f:
                json.dump(document, f, indent=2)
        else:
            with open(destination, "w", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
                writer.writeheader()
                writer.writerows(export_rows(job_urls, applications))

        self.logger.info("Data exported", format=fmt, path=str(destination))
        self.notifier.success(
            "Export complete", f"Saved your data in {fmt.upper()} format to {destination}"
        )
        return destination

    def clear_data(self) -> None:
        self.store.clear_data()
        self.notifier.notify(
            "Data cleared", "All application data has been removed", variant="destructive"
        )
