"""
Authentication and Upload Models
"""

from pydantic import EmailStr, Field, field_validator

from jobflow.models.common import WireModel


class LoginForm(WireModel):
    """Login and signup form."""

    email: EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def require_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class AuthResult(WireModel):
    """Outcome of a successful login or signup."""

    token: str
    email: str


class UploadResult(WireModel):
    """Location of an uploaded CV."""

    file_url: str = Field(..., alias="fileUrl")
    file_id: str = Field(..., alias="fileId")
    file_name: str = Field(..., alias="fileName")


class PresignedUpload(WireModel):
    """Time-limited storage URL handed out by the presign endpoint."""

    upload_url: str = Field(..., alias="uploadUrl")
    file_id: str = Field(..., alias="fileId")
    file_url: str = Field(..., alias="fileUrl")
