"""Form validation package."""

from src.validation.validator import (
    PROFILE_FORM_FIELDS,
    FormValidator,
    issues_from_error,
    parse_amount,
)

__all__ = ["PROFILE_FORM_FIELDS", "FormValidator", "issues_from_error", "parse_amount"]
