"""
Form Validation Models

What the UI shows the user when a form cannot be submitted.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single problem with a form field."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_format', 'not_positive')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )
    suggested_fix: Optional[str] = None


class ValidationResult(BaseModel):
    """
    Outcome of validating one form.

    `value` holds the parsed input model when there are no errors.
    """

    issues: list[ValidationIssue] = Field(default_factory=list)
    value: Optional[Any] = None

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        return sum(1 for issue in self.issues if issue.severity == "error")

    @property
    def is_valid(self) -> bool:
        return not self.has_errors and self.value is not None
