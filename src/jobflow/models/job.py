"""
Job Models

Job URLs tracked by the user, discovery results, and the search criteria
sent to the discovery endpoint.
"""

from typing import Literal, Optional

from pydantic import Field, field_validator

from jobflow.models.common import WireModel, check_http_url, coerce_id

JobUrlStatus = Literal["pending", "applied", "interviewed", "rejected"]
JOB_URL_STATUSES: tuple[str, ...] = ("pending", "applied", "interviewed", "rejected")

# Posted-date choices offered by the search form (days -> label)
POSTED_AFTER_CHOICES: dict[str, str] = {
    "1": "Past 24 hours",
    "3": "Past 3 days",
    "7": "Past week",
    "30": "Past month",
}


class JobUrl(WireModel):
    """A job posting URL saved by the user."""

    id: str
    url: str
    title: Optional[str] = None
    company: Optional[str] = None
    position: Optional[str] = None
    location: Optional[str] = None
    status: str = "pending"
    created_at: str = Field(default="", alias="createdAt")
    user_id: str = Field(default="", alias="userId")

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def stringify_ids(cls, v: object) -> object:
        return coerce_id(v)


class JobUrlCreate(WireModel):
    """Add-URL form. The backend assigns id, createdAt and userId."""

    url: str
    company: Optional[str] = None
    position: Optional[str] = None
    location: Optional[str] = None
    title: Optional[str] = None
    status: JobUrlStatus = "pending"

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        return check_http_url(v.strip())

    @field_validator("company", "position", "location", "title")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class JobListing(WireModel):
    """A job found by the discovery endpoint."""

    id: str
    title: str
    company: str
    location: str = ""
    url: str
    source: str = ""
    posted_date: str = Field(default="", alias="postedDate")
    salary: Optional[str] = None
    experience: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: object) -> object:
        return coerce_id(v)


class JobSearchCriteria(WireModel):
    """Job search form."""

    title: str
    location: str
    posted_after: str = Field(default="7", alias="postedAfter")
    remote: bool = False

    @field_validator("title")
    @classmethod
    def require_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Job title is required")
        return v

    @field_validator("location")
    @classmethod
    def require_location(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Location is required")
        return v

    @field_validator("posted_after", mode="before")
    @classmethod
    def validate_posted_after(cls, v: object) -> str:
        value = str(v).strip()
        if value not in POSTED_AFTER_CHOICES:
            raise ValueError(
                f"Posted date must be one of: {', '.join(POSTED_AFTER_CHOICES)} days"
            )
        return value
