"""
Application Models

Read-only application records and the dashboard counters.
"""

from typing import Optional

from pydantic import Field, field_validator

from jobflow.models.common import WireModel, coerce_id

APPLICATION_STATUSES: tuple[str, ...] = ("pending", "interview", "rejected", "accepted")


class Application(WireModel):
    """A submitted job application."""

    id: str
    company: Optional[str] = None
    position: Optional[str] = None
    applied_date: str = Field(..., alias="appliedDate")
    status: str = "pending"
    last_update: Optional[str] = Field(default=None, alias="lastUpdate")
    job_type: Optional[str] = Field(default=None, alias="jobType")
    work_type: Optional[str] = Field(default=None, alias="workType")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: object) -> object:
        return coerce_id(v)


class DashboardStats(WireModel):
    """Counters shown on the dashboard cards."""

    total_applications: int = Field(default=0, alias="totalApplications")
    pending_urls: int = Field(default=0, alias="pendingUrls")
    interviews: int = 0
    success_rate: float = Field(default=0, alias="successRate")
