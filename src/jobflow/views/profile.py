"""Profile and preferences views."""

from typing import Any, Iterable, Mapping, Optional

from rich.panel import Panel
from rich.table import Table

from jobflow.models.profile import UserPreferences, UserProfile, add_unique, remove_value
from jobflow.services.auth import AuthError
from jobflow.services.profile import PreferencesService, ProfileService
from jobflow.utils.forms import FormValidationError
from jobflow.utils.http_client import HttpError, NetworkError
from jobflow.utils.logger import get_logger
from jobflow.utils.notifier import Notifier
from jobflow.views.dashboard import build_preferences_panel
from jobflow.views.layout import empty_panel, error_panel

LIST_FIELDS = ("skills", "languages", "certifications")


def apply_list_edits(
    items: list[str], add: Iterable[str] = (), remove: Iterable[str] = ()
) -> list[str]:
    """Add values (trimmed, no duplicates) then remove values."""
    for value in add:
        items = add_unique(items, value)
    for value in remove:
        items = remove_value(items, value)
    return items


def build_profile_panel(profile: UserProfile) -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    rows = [
        ("Name", profile.name),
        ("Email", profile.email),
        ("Phone", profile.phone or ""),
        ("Location", profile.location),
        ("Experience", profile.experience),
        ("Education", profile.education),
        ("Availability", profile.availability),
        ("Remote", "yes" if profile.remote_preference else "no"),
        ("Salary", profile.salary_expectation or ""),
        ("Skills", ", ".join(profile.skills)),
        ("Languages", ", ".join(profile.languages)),
        ("Certifications", ", ".join(profile.certifications)),
        ("LinkedIn", profile.linkedin_url or ""),
        ("GitHub", profile.github_url or ""),
        ("Portfolio", profile.portfolio_url or ""),
        ("Summary", profile.summary),
    ]
    for label, value in rows:
        table.add_row(label, value or "[dim]-[/dim]")
    for item in profile.work_history:
        period = item.duration or " - ".join(
            d for d in (item.start_date, "present" if item.is_current else item.end_date) if d
        )
        table.add_row("Work", f"{item.job_title} at {item.company} ({period})")
    return Panel(table, title="Professional Profile")


class ProfileView:
    def __init__(
        self,
        service: ProfileService,
        notifier: Notifier,
        correlation_id: Optional[str] = None,
    ):
        self.service = service
        self.notifier = notifier
        self.console = notifier.console
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="profile", component="profile_view"
        )

    async def show(self) -> bool:
        try:
            profile = await self.service.get()
        except (HttpError, NetworkError) as e:
            self.console.print(error_panel(e, "Failed to load profile"))
            return False
        if profile is None:
            self.console.print(
                empty_panel("No profile yet", "Create one with: jobflow profile edit --name ...")
            )
            return True
        self.console.print(build_profile_panel(profile))
        return True

    async def edit(
        self,
        changes: Mapping[str, Any],
        list_edits: Optional[Mapping[str, tuple[Iterable[str], Iterable[str]]]] = None,
    ) -> bool:
        """Apply field changes on top of the saved profile and save it.

        Args:
            changes: Scalar field values to overwrite
            list_edits: Per list field, (values to add, values to remove)
        """
        try:
            current = await self.service.get()
        except (HttpError, NetworkError) as e:
            self.notifier.error("Failed to load profile", str(e))
            return False

        data: dict[str, Any] = {}
        if current is not None:
            data = current.model_dump(exclude={"id", "created_at", "updated_at"})
        data.update({k: v for k, v in changes.items() if v is not None})
        for field, (add, remove) in (list_edits or {}).items():
            data[field] = apply_list_edits(list(data.get(field) or []), add, remove)

        try:
            await self.service.save(data)
        except FormValidationError as e:
            for field, message in e.field_errors.items():
                self.notifier.error(f"Invalid {field}", message)
            return False
        except AuthError as e:
            self.notifier.error("Error", str(e))
            return False
        except (HttpError, NetworkError) as e:
            self.logger.error("Profile save failed", error=str(e))
            self.notifier.error("Error", "Failed to save profile")
            return False

        self.notifier.success("Profile saved", "Your profile has been updated successfully")
        return True


class PreferencesView:
    def __init__(self, service: PreferencesService, notifier: Notifier):
        self.service = service
        self.notifier = notifier
        self.console = notifier.console

    async def show(self) -> bool:
        try:
            preferences = await self.service.get()
        except (HttpError, NetworkError) as e:
            self.console.print(error_panel(e, "Failed to load preferences"))
            return False
        self.console.print(build_preferences_panel(preferences))
        return True

    async def edit(self, changes: Mapping[str, Optional[str]]) -> Optional[UserPreferences]:
        try:
            current = await self.service.get()
            values = current.model_dump()
            values.update({k: v for k, v in changes.items() if v is not None})
            saved = await self.service.save(values)
        except FormValidationError as e:
            self.notifier.error("Invalid preferences", str(e))
            return None
        except (HttpError, NetworkError):
            self.notifier.error("Error", "Failed to update preferences")
            return None
        self.notifier.success("Success", "Preferences updated successfully")
        return saved
