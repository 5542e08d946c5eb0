"""Dashboard settings persisted in local storage."""

from typing import Any, Mapping, Optional

from pydantic import ValidationError

from jobflow.models.settings import AppSettings
from jobflow.utils.forms import validate_form
from jobflow.utils.local_storage import SETTINGS_KEY, LocalStorage
from jobflow.utils.logger import get_logger


class SettingsStore:
    """Reads and writes the "jobflow-settings" blob."""

    def __init__(self, storage: LocalStorage, correlation_id: Optional[str] = None):
        self.storage = storage
        self.logger: Any = get_logger(
            correlation_id=correlation_id, view="settings", component="settings_store"
        )

    def load(self) -> AppSettings:
        """Stored settings, or defaults when nothing valid is stored."""
        stored = self.storage.get_json(SETTINGS_KEY)
        if not isinstance(stored, dict):
            return AppSettings()
        try:
            return AppSettings.model_validate(stored)
        except ValidationError as e:
            self.logger.warning(
                "Stored settings are invalid, using defaults", error_count=e.error_count()
            )
            return AppSettings()

    def save(self, values: Mapping[str, Any]) -> AppSettings:
        """Validate and persist a full settings blob.

        Raises:
            FormValidationError: A value is out of range or malformed
        """
        settings = validate_form(AppSettings, values, "settings")
        self.storage.set_json(SETTINGS_KEY, settings.to_wire())
        self.logger.info("Settings saved")
        return settings

    def update(self, **changes: Any) -> AppSettings:
        """Change some fields (by attribute or wire name) and save."""
        merged = self.load().model_dump()
        for name, value in changes.items():
            field = _field_name(name)
            merged[field] = value
        return self.save(merged)

    def clear_data(self) -> None:
        """Remove everything kept locally, credentials included."""
        self.storage.clear()
        self.logger.warning("Local data cleared")


def _field_name(name: str) -> str:
    """Map a wire alias (e.g. actionDelay) to its attribute name."""
    for attr, info in AppSettings.model_fields.items():
        if name in (attr, info.alias):
            return attr
    raise KeyError(f"Unknown setting: {name}")
