"""Dashboard: counters, preferences and recent applications."""

import asyncio
from typing import Any, Optional

from rich.columns import Columns
from rich.panel import Panel

from jobflow.models.application import DashboardStats
from jobflow.models.profile import UserPreferences
from jobflow.services.applications import ApplicationService, StatsService
from jobflow.services.profile import PreferencesService
from jobflow.utils.http_client import HttpError, NetworkError
from jobflow.utils.logger import get_logger
from jobflow.utils.notifier import Notifier
from jobflow.views.applications import build_applications_table
from jobflow.views.layout import empty_panel, error_panel, is_compact


def stat_cards(stats: DashboardStats) -> list[tuple[str, str]]:
    """(title, value) pairs in display order."""
    return [
        ("Total Applications", str(stats.total_applications)),
        ("Pending URLs", str(stats.pending_urls)),
        ("Interviews", str(stats.interviews)),
        ("Success Rate", f"{stats.success_rate:g}%"),
    ]


def build_stats_panels(stats: DashboardStats) -> list[Panel]:
    return [
        Panel(f"[bold]{value}[/bold]", title=title, expand=True)
        for title, value in stat_cards(stats)
    ]


def build_preferences_panel(preferences: UserPreferences) -> Panel:
    lines = []
    for label, value in (
        ("Qualifications", preferences.qualifications),
        ("Work experience", preferences.work_experience),
        ("Job preferences", preferences.job_preferences),
    ):
        lines.append(f"[bold]{label}:[/bold] {value or '[dim]not set[/dim]'}")
    return Panel("\n".join(lines), title="Your Preferences")


class DashboardView:
    """Loads the three dashboard sections concurrently.

    Each section fails independently: a failed query renders its own error
    panel while the other sections still render.
    """

    def __init__(
        self,
        stats: StatsService,
        applications: ApplicationService,
        preferences: PreferencesService,
        notifier: Notifier,
        recent_limit: int = 5,
        correlation_id: Optional[str] = None,
    ):
        self.stats = stats
        self.applications = applications
        self.preferences = preferences
        self.console = notifier.console
        self.recent_limit = recent_limit
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="dashboard", component="dashboard_view"
        )

    async def show(self) -> bool:
        stats, recent, preferences = await asyncio.gather(
            self.stats.get(),
            self.applications.recent(self.recent_limit),
            self.preferences.get(),
            return_exceptions=True,
        )
        ok = True
        compact = is_compact(self.console)

        if isinstance(stats, (HttpError, NetworkError)):
            self.console.print(error_panel(stats, "Failed to load stats"))
            ok = False
        elif isinstance(stats, BaseException):
            raise stats
        else:
            panels = build_stats_panels(stats)
            if compact:
                for panel in panels:
                    self.console.print(panel)
            else:
                self.console.print(Columns(panels, equal=True, expand=True))

        if isinstance(preferences, (HttpError, NetworkError)):
            self.console.print(error_panel(preferences, "Failed to load preferences"))
            ok = False
        elif isinstance(preferences, BaseException):
            raise preferences
        else:
            self.console.print(build_preferences_panel(preferences))

        if isinstance(recent, (HttpError, NetworkError)):
            self.console.print(error_panel(recent, "Failed to load applications"))
            ok = False
        elif isinstance(recent, BaseException):
            raise recent
        elif not recent:
            self.console.print(
                empty_panel("No applications found. Start by adding some job URLs!")
            )
        else:
            self.console.print(
                build_applications_table(recent, compact=compact, title="Recent Applications")
            )

        self.logger.debug("Dashboard rendered", ok=ok)
        return ok
