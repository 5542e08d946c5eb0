"""
User Profile Data Models
"""

import time
from typing import Optional

from pydantic import EmailStr, Field, ValidationInfo, field_validator

from jobflow.models.common import WireModel, check_http_url, coerce_id


class WorkHistoryItem(WireModel):
    """One entry of the profile's work history."""

    id: str = Field(default_factory=lambda: str(int(time.time() * 1000)))
    job_title: str = ""
    company: str = ""
    duration: str = ""
    location: str = ""
    description: str = ""
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_current: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: object) -> object:
        return coerce_id(v)


class UserProfile(WireModel):
    """Professional profile as stored by the backend.

    Lenient on purpose: a partially filled profile still loads. Edits go
    through UserProfileForm.
    """

    id: Optional[str] = None
    name: str = ""
    email: str = ""
    phone: Optional[str] = None
    location: str = ""
    experience: str = ""
    education: str = ""
    summary: str = ""
    skills: list[str] = Field(default_factory=list)
    work_history: list[WorkHistoryItem] = Field(default_factory=list)
    availability: str = ""
    salary_expectation: Optional[str] = None
    remote_preference: bool = False
    languages: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: object) -> object:
        return coerce_id(v)


class UserProfileForm(WireModel):
    """Profile edit form with submit-time validation."""

    name: str
    email: EmailStr
    phone: Optional[str] = None
    location: str
    experience: str
    education: str
    summary: str
    availability: str
    salary_expectation: Optional[str] = None
    remote_preference: bool = False
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    skills: list[str] = Field(default_factory=list)
    work_history: list[WorkHistoryItem] = Field(default_factory=list)
    languages: list[str] = Field(default_factory=list)
    certifications: list[str] = Field(default_factory=list)

    @field_validator("name", "location", "experience", "education", "availability")
    @classmethod
    def require_text(cls, v: str, info: ValidationInfo) -> str:
        v = v.strip()
        if not v:
            label = info.field_name.replace("_", " ").capitalize()
            if info.field_name == "experience":
                label = "Experience level"
            raise ValueError(f"{label} is required")
        return v

    @field_validator("summary")
    @classmethod
    def validate_summary(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Professional summary must be at least 10 characters")
        return v

    @field_validator("linkedin_url", "github_url", "portfolio_url")
    @classmethod
    def validate_link(cls, v: Optional[str]) -> Optional[str]:
        # Empty string is allowed and means "not set"
        if v is None or not v.strip():
            return None
        return check_http_url(v.strip())

    @classmethod
    def from_profile(cls, profile: UserProfile, **changes: object) -> "UserProfileForm":
        """Build a form pre-filled from a loaded profile, applying edits."""
        data = profile.model_dump(
            exclude={"id", "created_at", "updated_at"}, exclude_none=True
        )
        data.update(changes)
        return cls(**data)


class UserPreferences(WireModel):
    """Free-text preferences (the older, simpler profile shape)."""

    qualifications: Optional[str] = None
    work_experience: Optional[str] = Field(default=None, alias="workExperience")
    job_preferences: Optional[str] = Field(default=None, alias="jobPreferences")


def add_unique(items: list[str], value: str) -> list[str]:
    """Append a trimmed value unless it is blank or already present."""
    value = value.strip()
    if not value or value in items:
        return list(items)
    return [*items, value]


def remove_value(items: list[str], value: str) -> list[str]:
    return [item for item in items if item != value]
