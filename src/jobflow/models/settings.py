"""
Dashboard Settings Model

The settings panel's blob, persisted under the "jobflow-settings" key.
"""

from typing import Literal

from pydantic import Field, field_validator

from jobflow.models.common import WireModel, check_http_url

SyncFrequency = Literal["5min", "15min", "30min", "1hour", "manual"]


class AppSettings(WireModel):
    """User-facing dashboard settings."""

    api_endpoint: str = Field(
        default="https://api.jobflow.com/user-preferences", alias="apiEndpoint"
    )
    sync_frequency: SyncFrequency = Field(default="15min", alias="syncFrequency")
    auto_submit: bool = Field(default=False, alias="autoSubmit")
    confirmations: bool = True
    action_delay: int = Field(
        default=3,
        ge=1,
        le=30,
        alias="actionDelay",
        description="Seconds between opening tabs and filling forms",
    )
    local_backup: bool = Field(default=True, alias="localBackup")

    @field_validator("api_endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        return check_http_url(v.strip())
