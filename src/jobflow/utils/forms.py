"""
Form Validation Module
Validates user input against the form models before any request is sent.
"""

from typing import Any, Mapping, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

logger = structlog.get_logger(__name__)

FormT = TypeVar("FormT", bound=BaseModel)


class FormValidationError(Exception):
    """Raised when a form fails client-side validation.

    Attributes:
        form_name: Which form failed (for messages and logs)
        field_errors: Mapping of field name to a user-facing message
    """

    def __init__(self, form_name: str, field_errors: dict[str, str]):
        self.form_name = form_name
        self.field_errors = field_errors
        details = "; ".join(f"{k}: {v}" for k, v in field_errors.items())
        super().__init__(f"Invalid {form_name}: {details}")


def _field_label(field: str) -> str:
    return field.replace("_", " ").capitalize()


def format_validation_errors(error: ValidationError) -> dict[str, str]:
    """
    Turn pydantic errors into one user-facing message per field.

    Args:
        error: ValidationError raised by a form model

    Returns:
        Mapping of dotted field path to message (first error per field wins)
    """
    messages: dict[str, str] = {}

    for item in error.errors():
        path = ".".join(str(p) for p in item.get("loc", ())) or "(form)"
        if path in messages:
            continue
        field = str(item["loc"][-1]) if item.get("loc") else "form"
        error_type = item.get("type", "")
        msg = item.get("msg", "Invalid value")

        if error_type == "missing":
            messages[path] = f"{_field_label(field)} is required"
        elif error_type == "value_error":
            # Custom validator messages arrive as "Value error, <message>"
            text = msg.removeprefix("Value error, ")
            if "email address" in text:
                text = "Valid email is required"
            messages[path] = text
        elif error_type == "literal_error":
            expected = item.get("ctx", {}).get("expected", "")
            messages[path] = f"Invalid value. Allowed values: {expected}"
        elif error_type in ("greater_than_equal", "less_than_equal"):
            messages[path] = f"Value out of range: {msg}"
        elif error_type in ("string_type", "bool_type", "int_type", "int_parsing"):
            messages[path] = f"Type mismatch: {msg}"
        else:
            messages[path] = msg

    return messages


def validate_form(
    model: type[FormT], data: Mapping[str, Any], form_name: str | None = None
) -> FormT:
    """
    Validate raw form input.

    Args:
        model: Form model class
        data: Field values as entered (attribute names or backend aliases)
        form_name: Name used in messages (defaults to the model name)

    Returns:
        The validated form model

    Raises:
        FormValidationError: If any field is invalid
    """
    name = form_name or model.__name__
    try:
        form = model.model_validate(dict(data))
    except ValidationError as e:
        field_errors = format_validation_errors(e)
        logger.warning(
            "form_validation_failed",
            form=name,
            fields=sorted(field_errors),
        )
        raise FormValidationError(name, field_errors) from e

    logger.debug("form_validation_passed", form=name)
    return form
