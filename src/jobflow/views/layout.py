"""Shared rendering helpers for the dashboard views."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel

from jobflow.utils.http_client import HttpError, NetworkError, ResponseFormatError

# Terminals narrower than this get the compact (mobile) layout
COMPACT_WIDTH = 100

STATUS_STYLES = {
    "pending": "yellow",
    "applied": "blue",
    "interview": "magenta",
    "interviewed": "magenta",
    "accepted": "green",
    "rejected": "red",
}


def is_compact(console: Console) -> bool:
    return console.width < COMPACT_WIDTH


def status_badge(status: str) -> str:
    style = STATUS_STYLES.get(status, "white")
    return f"[{style}]{status}[/{style}]"


def matches_search(query: str, *fields: Optional[str]) -> bool:
    """Case-insensitive substring match against any of the given fields."""
    query = query.strip().lower()
    if not query:
        return True
    return any(query in (value or "").lower() for value in fields)


def matches_status(status_filter: Optional[str], status: str) -> bool:
    return not status_filter or status_filter == "all" or status == status_filter


def error_panel(error: Exception, title: str = "Error") -> Panel:
    """Render a failed query; the view shows this instead of its list."""
    if isinstance(error, (ResponseFormatError, NetworkError)):
        body = error.message
    elif isinstance(error, HttpError):
        body = f"[bold]{error.status}[/bold]: {error.message}"
    else:
        body = str(error) or error.__class__.__name__
    return Panel(body, title=f"[bold red]{title}[/bold red]", border_style="red")


def empty_panel(message: str, hint: str = "") -> Panel:
    body = message if not hint else f"{message}\n[dim]{hint}[/dim]"
    return Panel(body, border_style="dim")
