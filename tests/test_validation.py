"""
Tests for form validation

The validator must agree with the store: whatever it accepts, the store
accepts, and it reports problems as plain-language issues.
"""

from decimal import Decimal

import pytest

from src.ledger import LedgerStore
from src.models.ledger import SavingGoalInput, TransactionInput, TransactionType
from src.validation import PROFILE_FORM_FIELDS, FormValidator, parse_amount


@pytest.fixture
def validator():
    return FormValidator()


class TestParseAmount:
    """Tests for parsing user-typed amounts."""

    @pytest.mark.parametrize("raw, expected", [
        ("1200", Decimal("1200")),
        ("1200.50", Decimal("1200.50")),
        ("1200,50", Decimal("1200.50")),
        ("12 000", Decimal("12000")),
        ("12 000,5", Decimal("12000.5")),
        (" 45 ", Decimal("45")),
        (7, Decimal("7")),
        (Decimal("3.25"), Decimal("3.25")),
    ])
    def test_accepts(self, raw, expected):
        assert parse_amount(raw) == expected

    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "12kr", "Infinity", "NaN"])
    def test_rejects(self, raw):
        assert parse_amount(raw) is None


class TestTransactionForm:
    """Tests for the add/edit transaction form."""

    def test_valid(self, validator):
        result = validator.validate_transaction("120,50", "expense", " Food ", "Lunch")

        assert result.is_valid
        assert isinstance(result.value, TransactionInput)
        assert result.value.amount == Decimal("120.50")
        assert result.value.type == TransactionType.EXPENSE
        assert result.value.category == "Food"

    def test_missing_amount(self, validator):
        result = validator.validate_transaction("", "expense", "Food")
        assert not result.is_valid
        assert result.issues[0].field == "amount"
        assert result.issues[0].issue_type == "missing"

    def test_amount_not_a_number(self, validator):
        result = validator.validate_transaction("ten", "expense", "Food")
        assert result.issues[0].issue_type == "invalid_format"
        assert result.issues[0].suggested_fix

    def test_zero_amount(self, validator):
        result = validator.validate_transaction("0", "income", "CSN")
        assert not result.is_valid
        assert result.issues[0].issue_type == "not_positive"
        assert result.issues[0].message == "Amount must be greater than 0"

    def test_blank_category(self, validator):
        result = validator.validate_transaction("10", "expense", "   ")
        assert not result.is_valid
        assert result.issues[0].field == "category"
        assert result.issues[0].message == "Category is required"

    def test_note_too_long(self, validator):
        result = validator.validate_transaction("10", "expense", "Food", "x" * 501)
        assert result.issues[0].issue_type == "too_long"

    def test_accepted_value_is_accepted_by_store(self, validator):
        result = validator.validate_transaction("99", TransactionType.INCOME, "Job")
        store = LedgerStore()
        store.add_transaction(result.value)
        assert store.compute_summary().income == Decimal("99")


class TestGoalForm:
    """Tests for the new saving goal form."""

    def test_valid(self, validator):
        result = validator.validate_goal("Laptop", "10 000", "0")
        assert result.is_valid
        assert isinstance(result.value, SavingGoalInput)
        assert result.value.target_amount == Decimal("10000")

    def test_collects_both_amount_issues(self, validator):
        result = validator.validate_goal("Laptop", "", "abc")
        fields = {issue.field for issue in result.issues}
        assert fields == {"target_amount", "saved_amount"}
        assert result.error_count == 2

    def test_blank_name(self, validator):
        result = validator.validate_goal("  ", "100")
        assert result.issues[0].field == "name"
        assert result.issues[0].message == "Goal name is required"

    def test_negative_saved(self, validator):
        result = validator.validate_goal("Laptop", "100", "-1")
        assert result.issues[0].message == "Saved amount must be at least 0"


class TestFundingForm:
    """Tests for the add-funds form."""

    def test_valid(self, validator):
        result = validator.validate_funding("500")
        assert result.is_valid
        assert result.value == Decimal("500")

    @pytest.mark.parametrize("raw", ["0", "-20"])
    def test_not_positive(self, validator, raw):
        result = validator.validate_funding(raw)
        assert not result.is_valid
        assert result.issues[0].issue_type == "not_positive"

    def test_missing(self, validator):
        result = validator.validate_funding("  ")
        assert result.issues[0].issue_type == "missing"


class TestProfileForm:
    """Tests for the edit profile form."""

    def test_valid(self, validator):
        result = validator.validate_profile("Fredrik", "KTH", "Saving up", "")
        assert result.is_valid
        assert result.value.model_dump(include=PROFILE_FORM_FIELDS) == {
            "display_name": "Fredrik",
            "school": "KTH",
            "bio": "Saving up",
            "photo_url": "",
        }

    def test_bio_too_long(self, validator):
        result = validator.validate_profile("Fredrik", "KTH", "x" * 501)
        assert not result.is_valid
        assert result.issues[0].field == "bio"
        assert result.issues[0].message == "Bio must be at most 500 characters"

    def test_name_too_long(self, validator):
        result = validator.validate_profile("x" * 101, "KTH", "")
        assert result.issues[0].field == "display_name"
        assert result.issues[0].issue_type == "too_long"

    def test_accepted_value_is_accepted_by_store(self, validator):
        result = validator.validate_profile("Fredrik", "KTH", "Saving up")
        store = LedgerStore()
        profile = store.update_profile(result.value.model_dump(include=PROFILE_FORM_FIELDS))
        assert profile.display_name == "Fredrik"


class TestPostForm:
    """Tests for the new community post form."""

    def test_valid(self, validator):
        result = validator.validate_post(" Saved 500 SEK! ", "")
        assert result.is_valid
        assert result.value.text == "Saved 500 SEK!"
        assert result.value.image_url is None

    def test_blank(self, validator):
        result = validator.validate_post("   ")
        assert result.issues[0].message == "Post is required"

    def test_too_long(self, validator):
        result = validator.validate_post("x" * 1001)
        assert result.issues[0].message == "Post must be at most 1000 characters"


class TestSummaryText:
    """Tests for the message shown above a rejected form."""

    def test_valid_summary(self, validator):
        result = validator.validate_funding("10")
        assert validator.get_user_friendly_summary(result) == "✅ Looks good!"

    def test_issue_summary(self, validator):
        result = validator.validate_transaction("x", "expense", "Food")
        summary = validator.get_user_friendly_summary(result)
        assert summary.startswith("❌ Please fix the following:")
        assert "Amount must be a number" in summary
        assert "💡" in summary


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
