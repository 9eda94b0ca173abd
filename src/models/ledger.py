"""
Ledger Models for CashBuddy

These models define the schemas for the ledger and the user's profile.
They are designed to:
1. Reject malformed input at the store boundary
2. Keep money as Decimal so budget sums never drift
3. Be cheap to copy, so the store can hand out snapshots

DESIGN DECISION: A funding transaction is linked to its saving goal twice:
through the human-readable note (`Added to "<name>" goal`) and through an
explicit `goal_id` back-reference. The note survives for display and for
transactions entered by hand; the id survives a goal rename.
"""

import re
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
)


SAVING_CATEGORY = "Saving"

FUNDING_NOTE_TEMPLATE = 'Added to "{name}" goal'
FUNDING_NOTE_PATTERN = re.compile(r'^Added to "([^"]+)" goal')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_funding_note(goal_name: str) -> str:
    """Build the note carried by a goal funding transaction."""
    return FUNDING_NOTE_TEMPLATE.format(name=goal_name)


def parse_funding_note(note: str) -> Optional[str]:
    """
    Extract the goal name from a funding note.

    Returns None if the note was not written by a funding event.
    """
    match = FUNDING_NOTE_PATTERN.match(note or "")
    if match:
        return match.group(1)
    return None


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionInput(BaseModel):
    """
    Fields supplied by the caller when recording a transaction.

    The store assigns `id` and `date` itself.
    """
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    amount: Decimal = Field(
        ...,
        gt=0,
        description="Positive magnitude of the transaction"
    )
    type: TransactionType = Field(
        ...,
        description="income or expense"
    )
    category: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Free-text category label"
    )
    note: str = Field(
        default="",
        max_length=500,
        description="Optional free-text note"
    )


class Transaction(TransactionInput):
    """
    A recorded transaction.

    `id` and `date` are assigned once at creation and never change.
    `goal_id` is set only by the store, when a goal is funded.
    """

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    date: datetime = Field(
        default_factory=utc_now,
        description="When the transaction was recorded (UTC)"
    )
    goal_id: Optional[UUID] = Field(
        default=None,
        description="Saving goal this transaction funded (reference only)"
    )

    @property
    def is_funding(self) -> bool:
        """Was this transaction written by a goal funding event?"""
        if self.goal_id is not None:
            return True
        return (
            self.category == SAVING_CATEGORY
            and parse_funding_note(self.note) is not None
        )

    @property
    def signed_amount(self) -> Decimal:
        """Amount with expenses negated, for display."""
        if self.type == TransactionType.INCOME:
            return self.amount
        return -self.amount


# =============================================================================
# PROFILE & SAVING GOALS
# =============================================================================

GoalName = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=1, max_length=100),
]


class SavingGoalInput(BaseModel):
    """Fields supplied by the caller when creating a saving goal."""
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    name: GoalName = Field(
        ...,
        description="Display name, also written into funding notes"
    )
    target_amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount the user wants to reach"
    )
    saved_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Amount already saved; may exceed the target"
    )


class SavingGoal(SavingGoalInput):
    """A named saving target with tracked progress."""

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique goal ID"
    )

    @property
    def progress_percent(self) -> float:
        """Progress towards the target, capped at 100 for display."""
        if self.target_amount <= 0:
            return 0.0
        return min(100.0, float(self.saved_amount / self.target_amount * 100))

    @property
    def is_complete(self) -> bool:
        return self.saved_amount >= self.target_amount


class Badge(BaseModel):
    """Display-only achievement badge."""

    code: str
    title: str
    icon: str


class ProfileData(BaseModel):
    """
    The user's profile.

    Owns the collection of saving goals, which must be unique by id.
    """
    model_config = ConfigDict(extra="forbid")

    display_name: str = Field(default="", max_length=100)
    school: str = Field(default="", max_length=200)
    bio: str = Field(default="", max_length=500)
    photo_url: str = Field(
        default="",
        description="Data URI or remote URL of the profile photo"
    )
    badges: list[Badge] = Field(default_factory=list)
    saving_goals: list[SavingGoal] = Field(default_factory=list)

    @field_validator("saving_goals")
    @classmethod
    def validate_unique_goal_ids(cls, v: list[SavingGoal]) -> list[SavingGoal]:
        """Goal ids are the store's lookup key."""
        ids = [goal.id for goal in v]
        if len(ids) != len(set(ids)):
            raise ValueError("Saving goal ids must be unique")
        return v


# =============================================================================
# DERIVED
# =============================================================================

class BudgetSummary(BaseModel):
    """Income/expense roll-up over the whole ledger. Never stored."""

    income: Decimal = Decimal("0")
    expenses: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
