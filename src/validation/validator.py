"""
Form Validation

DESIGN DECISION: The UI validates raw form input before calling the store.
The store still rejects bad input on its own (its input models raise
pydantic.ValidationError), but a form should never get that far:
the user gets a plain-language message instead of an exception.

Validation happens in two steps:
1. PARSING - turn the text the user typed into numbers
   ("1 200,50" and "1200.50" are both accepted)
2. MODEL CHECKS - run the same pydantic input model the store uses,
   so the form and the store can never disagree about what is valid

IMPORTANT: Validation NEVER silently fixes values beyond trimming
whitespace and normalising the decimal separator.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from pydantic import BaseModel, ValidationError

from src.models.community import Post
from src.models.forms import ValidationIssue, ValidationResult
from src.models.ledger import ProfileData, SavingGoalInput, TransactionInput, TransactionType


PROFILE_FORM_FIELDS = {"display_name", "school", "bio", "photo_url"}

FIELD_LABELS = {
    "amount": "Amount",
    "category": "Category",
    "note": "Note",
    "type": "Type",
    "name": "Goal name",
    "target_amount": "Target amount",
    "saved_amount": "Saved amount",
    "display_name": "Name",
    "school": "School",
    "bio": "Bio",
    "photo_url": "Photo URL",
    "text": "Post",
    "image_url": "Image URL",
}


def parse_amount(raw: Union[str, int, float, Decimal, None]) -> Optional[Decimal]:
    """
    Parse a user-typed amount.

    Accepts a decimal comma and thousands spaces, as written in Sweden.
    Returns None if the text is not a number.
    """
    if raw is None:
        return None
    if isinstance(raw, Decimal):
        return raw if raw.is_finite() else None
    if isinstance(raw, (int, float)):
        raw = str(raw)

    text = raw.strip().replace(" ", "").replace("\u00a0", "").replace(",", ".")
    if not text:
        return None
    try:
        value = Decimal(text)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def issues_from_error(error: ValidationError) -> list[ValidationIssue]:
    """Convert a pydantic ValidationError into user-facing issues."""
    issues = []
    for detail in error.errors():
        field = str(detail["loc"][0]) if detail.get("loc") else "form"
        label = FIELD_LABELS.get(field, field.replace("_", " ").capitalize())
        error_type = detail.get("type", "invalid")

        if error_type in ("greater_than", "greater_than_equal"):
            limit = detail.get("ctx", {}).get("gt", detail.get("ctx", {}).get("ge"))
            comparison = "greater than" if error_type == "greater_than" else "at least"
            message = f"{label} must be {comparison} {limit}"
            issue_type = "not_positive"
        elif error_type in ("string_too_short", "missing"):
            message = f"{label} is required"
            issue_type = "missing"
        elif error_type == "string_too_long":
            limit = detail.get("ctx", {}).get("max_length")
            message = f"{label} must be at most {limit} characters"
            issue_type = "too_long"
        else:
            message = f"{label}: {detail.get('msg', 'invalid value')}"
            issue_type = "invalid_value"

        issues.append(ValidationIssue(
            field=field,
            issue_type=issue_type,
            message=message,
        ))
    return issues


class FormValidator:
    """
    Validates the app's forms before they reach the store or the feed.
    """

    def _amount_issue(self, field: str, raw: Any) -> Optional[ValidationIssue]:
        label = FIELD_LABELS[field]
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            return ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            )
        if parse_amount(raw) is None:
            return ValidationIssue(
                field=field,
                issue_type="invalid_format",
                message=f"{label} must be a number",
                suggested_fix="Use digits only, e.g. 1200 or 1200,50",
            )
        return None

    def _build(self, model: type[BaseModel], data: dict, issues: list) -> ValidationResult:
        if issues:
            return ValidationResult(issues=issues)
        try:
            return ValidationResult(value=model.model_validate(data))
        except ValidationError as e:
            return ValidationResult(issues=issues_from_error(e))

    def validate_transaction(
        self,
        amount: Any,
        transaction_type: Union[TransactionType, str],
        category: str,
        note: str = "",
    ) -> ValidationResult:
        """Validate the add/edit transaction form."""
        issues = []
        amount_issue = self._amount_issue("amount", amount)
        if amount_issue:
            issues.append(amount_issue)

        return self._build(
            TransactionInput,
            {
                "amount": parse_amount(amount),
                "type": transaction_type,
                "category": category or "",
                "note": note or "",
            },
            issues,
        )

    def validate_goal(
        self,
        name: str,
        target_amount: Any,
        saved_amount: Any = "0",
    ) -> ValidationResult:
        """Validate the new saving goal form."""
        issues = []
        for field, raw in (("target_amount", target_amount), ("saved_amount", saved_amount)):
            amount_issue = self._amount_issue(field, raw)
            if amount_issue:
                issues.append(amount_issue)

        return self._build(
            SavingGoalInput,
            {
                "name": name or "",
                "target_amount": parse_amount(target_amount),
                "saved_amount": parse_amount(saved_amount),
            },
            issues,
        )

    def validate_funding(self, amount: Any) -> ValidationResult:
        """Validate the "add funds to goal" form."""
        amount_issue = self._amount_issue("amount", amount)
        if amount_issue:
            return ValidationResult(issues=[amount_issue])

        value = parse_amount(amount)
        if value <= 0:
            return ValidationResult(issues=[ValidationIssue(
                field="amount",
                issue_type="not_positive",
                message="Amount must be greater than 0",
            )])
        return ValidationResult(value=value)

    def validate_profile(
        self,
        display_name: str,
        school: str,
        bio: str,
        photo_url: str = "",
    ) -> ValidationResult:
        """
        Validate the edit profile form.

        The value is a ProfileData holding only the edited fields; pass
        `value.model_dump(include=PROFILE_FORM_FIELDS)` to the store.
        """
        return self._build(
            ProfileData,
            {
                "display_name": display_name or "",
                "school": school or "",
                "bio": bio or "",
                "photo_url": photo_url or "",
            },
            [],
        )

    def validate_post(self, text: str, image_url: str = "") -> ValidationResult:
        """Validate the new community post form. Author is filled in later."""
        return self._build(
            Post,
            {
                "author": "",
                "text": text or "",
                "image_url": image_url or None,
            },
            [],
        )

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.
        """
        if result.is_valid:
            return "✅ Looks good!"

        lines = ["❌ Please fix the following:"]
        for issue in result.issues:
            lines.append(f"   • {issue.message}")
            if issue.suggested_fix:
                lines.append(f"     💡 {issue.suggested_fix}")
        return "\n".join(lines)
