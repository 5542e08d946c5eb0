"""
Shared field helpers for the dashboard models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, HttpUrl, TypeAdapter, ValidationError

_http_url = TypeAdapter(HttpUrl)


class WireModel(BaseModel):
    """Base model for records exchanged with the backend.

    Attributes are snake_case; the backend's field names are aliases.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        """Serialize with backend field names, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def check_http_url(value: str) -> str:
    """Validate an http(s) URL and return it unchanged.

    Raises:
        ValueError: If value is not a valid http(s) URL
    """
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("Invalid URL") from None
    return value


def coerce_id(value: Any) -> Any:
    """Opaque identifiers are strings; numeric ids are converted."""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value
