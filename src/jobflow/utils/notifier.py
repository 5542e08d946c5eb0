"""
Notifier Module

Wraps the rich library for the dashboard's transient notifications and busy
indicators, so every command reports success and failure the same way.

Example Usage:
    from jobflow.utils.notifier import Notifier

    notifier = Notifier()

    with notifier.busy("Searching for jobs..."):
        result = await discovery.discover(criteria)

    notifier.success("Jobs found!", f"{result.count} jobs discovered")
    notifier.error("Search failed", "Please try again later.")
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Optional

from rich.console import Console


@dataclass
class Notification:
    """A notification as shown to the user."""

    title: str
    description: str = ""
    variant: str = "default"


class Notifier:
    """Prints toast-style notifications and spinners using rich."""

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize Notifier.

        Args:
            console: rich Console to print to (default: a new stdout console)
        """
        self.console = console or Console()
        self.history: list[Notification] = []

    def notify(self, title: str, description: str = "", variant: str = "default") -> None:
        """
        Show a notification.

        Args:
            title: Short headline (e.g., "Success")
            description: Detail line
            variant: "default" or "destructive"
        """
        notification = Notification(title=title, description=description, variant=variant)
        self.history.append(notification)

        if variant == "destructive":
            self.console.print(f"[bold red][X] {title}[/bold red]")
        else:
            self.console.print(f"[bold green][+] {title}[/bold green]")
        if description:
            self.console.print(f"    {description}")

    def success(self, title: str, description: str = "") -> None:
        self.notify(title, description)

    def error(self, title: str, description: str = "") -> None:
        self.notify(title, description, variant="destructive")

    @contextmanager
    def busy(self, message: str) -> Iterator[None]:
        """
        Show a spinner while a request is in flight.

        Example:
            with notifier.busy("Uploading CV..."):
                await uploads.upload(path)
        """
        with self.console.status(f"[bold blue]{message}"):
            yield

    @property
    def last(self) -> Optional[Notification]:
        return self.history[-1] if self.history else None
