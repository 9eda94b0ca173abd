"""
Ledger & Goals Store

The single owner of the user's transactions and profile (including the
saving goals). Every other part of the app reads snapshots from here and
calls the operations below to change anything.

CRITICAL INVARIANT: funding a saving goal is one logical operation.
It records an expense transaction AND raises the goal's saved amount.
Deleting that transaction reverses the raise (clamped at zero), as long
as the goal still exists.

DESIGN DECISIONS:
1. Not-found is a no-op. Unknown ids never raise; mutators return
   False/None so the caller can tell, but nothing is surfaced to the user.
2. Input is validated at the boundary by the pydantic input models.
3. The budget summary is recomputed from the full list on every call.
   There is no cached running total to drift out of sync.
4. One RLock per store: Streamlit reruns happen on worker threads.
"""

import copy
from collections.abc import Mapping
from decimal import Decimal
from threading import RLock
from typing import Any, Optional, Union
from uuid import UUID

import structlog
from pydantic import TypeAdapter

from src.audit import AuditLogger
from src.models.ledger import (
    SAVING_CATEGORY,
    BudgetSummary,
    GoalName,
    ProfileData,
    SavingGoal,
    SavingGoalInput,
    Transaction,
    TransactionInput,
    TransactionType,
    format_funding_note,
    parse_funding_note,
)


logger = structlog.get_logger(__name__)

_goal_name_adapter = TypeAdapter(GoalName)


class LedgerStore:
    """
    In-memory store for the ledger and the profile.

    Transactions are kept most-recent-first, which is also display order.
    """

    def __init__(
        self,
        profile: Optional[ProfileData] = None,
        transactions: Optional[list[Transaction]] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._profile = profile.model_copy(deep=True) if profile else ProfileData()
        self._transactions: list[Transaction] = [
            t.model_copy(deep=True) for t in (transactions or [])
        ]
        self._audit_logger = audit_logger
        self._lock = RLock()

    # =========================================================================
    # READ ACCESS (snapshots only)
    # =========================================================================

    @property
    def transactions(self) -> list[Transaction]:
        """Copy of the ledger, most recent first."""
        with self._lock:
            return [t.model_copy(deep=True) for t in self._transactions]

    @property
    def profile(self) -> ProfileData:
        """Copy of the profile, including saving goals."""
        with self._lock:
            return self._profile.model_copy(deep=True)

    @property
    def saving_goals(self) -> list[SavingGoal]:
        with self._lock:
            return [g.model_copy(deep=True) for g in self._profile.saving_goals]

    def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        with self._lock:
            index = self._find_transaction_index(transaction_id)
            if index is None:
                return None
            return self._transactions[index].model_copy(deep=True)

    def get_saving_goal(self, goal_id: UUID) -> Optional[SavingGoal]:
        with self._lock:
            goal = self._find_goal(goal_id)
            return goal.model_copy(deep=True) if goal else None

    def funding_transactions(self, goal_id: UUID) -> list[Transaction]:
        """Transactions that funded the given goal, resolved the same way delete does."""
        funded = []
        with self._lock:
            for transaction in self._transactions:
                linked = self._resolve_linked_goal(transaction)
                if linked is not None and linked.id == goal_id:
                    funded.append(transaction.model_copy(deep=True))
        return funded

    # =========================================================================
    # TRANSACTIONS
    # =========================================================================

    def add_transaction(
        self,
        transaction: Union[TransactionInput, Mapping[str, Any]],
    ) -> Transaction:
        """
        Record a new transaction.

        Assigns a fresh id and the current timestamp, and puts the
        transaction at the front of the ledger.

        Raises:
            pydantic.ValidationError: If amount is not positive or the
                category is blank.
        """
        data = self._coerce(TransactionInput, transaction)
        new_transaction = Transaction(**data.model_dump())

        with self._lock:
            self._transactions.insert(0, new_transaction)

        if self._audit_logger:
            self._audit_logger.log_transaction_added(
                transaction_id=new_transaction.id,
                transaction_type=new_transaction.type.value,
                category=new_transaction.category,
                amount=new_transaction.amount,
            )
        return new_transaction.model_copy(deep=True)

    def edit_transaction(self, updated: Transaction) -> bool:
        """
        Replace the stored transaction with the same id, in place.

        The stored creation date and goal link are kept. Editing a
        funding transaction does NOT change its goal's saved amount.

        Returns:
            False if no transaction has that id (nothing changes).
        """
        # model_copy(update=...) skips validation; re-validate here
        validated = Transaction.model_validate(updated.model_dump())

        with self._lock:
            index = self._find_transaction_index(validated.id)
            if index is None:
                logger.debug("transaction_not_found", transaction_id=str(validated.id))
                return False

            current = self._transactions[index]
            replacement = validated.model_copy(
                update={"date": current.date, "goal_id": current.goal_id}
            )
            changes = {
                field: str(getattr(replacement, field))
                for field in ("amount", "type", "category", "note")
                if getattr(replacement, field) != getattr(current, field)
            }
            self._transactions[index] = replacement

        if self._audit_logger:
            self._audit_logger.log_transaction_edited(
                transaction_id=replacement.id,
                changes=changes,
            )
        return True

    def delete_transaction(self, transaction_id: UUID) -> bool:
        """
        Remove a transaction, reversing its effect on a funded goal.

        If the transaction funded a saving goal that still exists, the
        goal's saved amount is reduced by the transaction amount, never
        below zero. If the goal is gone, only the transaction is removed.

        Returns:
            False if no transaction has that id (nothing changes).
        """
        with self._lock:
            index = self._find_transaction_index(transaction_id)
            if index is None:
                logger.debug("transaction_not_found", transaction_id=str(transaction_id))
                return False

            transaction = self._transactions[index]
            reversed_goal = None
            if transaction.is_funding:
                reversed_goal = self._resolve_linked_goal(transaction)
                if reversed_goal is not None:
                    reversed_goal.saved_amount = max(
                        Decimal("0"),
                        reversed_goal.saved_amount - transaction.amount,
                    )

            del self._transactions[index]

        if self._audit_logger:
            if transaction.is_funding:
                if reversed_goal is not None:
                    self._audit_logger.log_goal_funding_reversed(
                        goal_id=reversed_goal.id,
                        name=reversed_goal.name,
                        amount=transaction.amount,
                        transaction_id=transaction.id,
                        saved_amount=reversed_goal.saved_amount,
                    )
                else:
                    self._audit_logger.log_goal_link_missed(
                        transaction_id=transaction.id,
                        goal_reference=str(
                            transaction.goal_id or parse_funding_note(transaction.note)
                        ),
                    )
            self._audit_logger.log_transaction_deleted(
                transaction_id=transaction.id,
                amount=transaction.amount,
                category=transaction.category,
            )
        return True

    # =========================================================================
    # SAVING GOALS
    # =========================================================================

    def add_saving_goal(
        self,
        goal: Union[SavingGoalInput, Mapping[str, Any]],
    ) -> SavingGoal:
        """
        Append a new saving goal with a fresh id.

        Raises:
            pydantic.ValidationError: If the name is blank, the target is
                not positive or the saved amount is negative.
        """
        data = self._coerce(SavingGoalInput, goal)
        new_goal = SavingGoal(**data.model_dump())

        with self._lock:
            self._profile.saving_goals.append(new_goal)

        if self._audit_logger:
            self._audit_logger.log_goal_added(
                goal_id=new_goal.id,
                name=new_goal.name,
                target_amount=new_goal.target_amount,
            )
        return new_goal.model_copy(deep=True)

    def rename_saving_goal(self, goal_id: UUID, name: str) -> Optional[SavingGoal]:
        """
        Change a goal's display name.

        Earlier funding transactions keep their old note but stay linked
        through their goal_id.
        """
        new_name = _goal_name_adapter.validate_python(name)

        with self._lock:
            goal = self._find_goal(goal_id)
            if goal is None:
                logger.debug("goal_not_found", goal_id=str(goal_id))
                return None
            old_name = goal.name
            goal.name = new_name
            snapshot = goal.model_copy(deep=True)

        if self._audit_logger:
            self._audit_logger.log_goal_renamed(
                goal_id=goal_id,
                old_name=old_name,
                new_name=new_name,
            )
        return snapshot

    def delete_saving_goal(self, goal_id: UUID) -> bool:
        """
        Remove a saving goal.

        Transactions that funded it stay in the ledger as ordinary expenses.
        """
        with self._lock:
            goal = self._find_goal(goal_id)
            if goal is None:
                logger.debug("goal_not_found", goal_id=str(goal_id))
                return False
            self._profile.saving_goals = [
                g for g in self._profile.saving_goals if g.id != goal_id
            ]

        if self._audit_logger:
            self._audit_logger.log_goal_deleted(
                goal_id=goal.id,
                name=goal.name,
                saved_amount=goal.saved_amount,
            )
        return True

    def add_to_saving_goal(
        self,
        goal_id: UUID,
        amount: Union[Decimal, int, str],
    ) -> Optional[Transaction]:
        """
        Move money into a saving goal.

        Records an expense in the "Saving" category, noted with the goal's
        current name, and raises the goal's saved amount by the same amount.
        Both happen under the store lock, or neither does.

        Returns:
            The funding transaction, or None if the goal does not exist.

        Raises:
            InvalidAmountError: If amount is not positive. Nothing changes.
        """
        amount = self._positive_amount(amount)

        with self._lock:
            goal = self._find_goal(goal_id)
            if goal is None:
                logger.debug("goal_not_found", goal_id=str(goal_id))
                return None

            funding = Transaction(
                amount=amount,
                type=TransactionType.EXPENSE,
                category=SAVING_CATEGORY,
                note=format_funding_note(goal.name),
                goal_id=goal.id,
            )
            self._transactions.insert(0, funding)
            goal.saved_amount += amount
            goal_name = goal.name

        if self._audit_logger:
            self._audit_logger.log_transaction_added(
                transaction_id=funding.id,
                transaction_type=funding.type.value,
                category=funding.category,
                amount=funding.amount,
                correlation_id=funding.id,
            )
            self._audit_logger.log_goal_funded(
                goal_id=goal_id,
                name=goal_name,
                amount=amount,
                transaction_id=funding.id,
            )
        return funding.model_copy(deep=True)

    # =========================================================================
    # PROFILE
    # =========================================================================

    def update_profile(
        self,
        changes: Optional[Mapping[str, Any]] = None,
        **fields: Any,
    ) -> ProfileData:
        """
        Shallow-merge the given fields into the profile.

        Accepts a mapping, keyword arguments, or both. Values are copied,
        so the caller keeps no reference into the stored profile.

        Raises:
            pydantic.ValidationError: On unknown fields or invalid values.
        """
        updates = copy.deepcopy({**(changes or {}), **fields})

        with self._lock:
            merged = {**self._profile.model_dump(), **updates}
            self._profile = ProfileData.model_validate(merged)
            snapshot = self._profile.model_copy(deep=True)

        if self._audit_logger:
            self._audit_logger.log_profile_updated(fields=sorted(updates))
        return snapshot

    # =========================================================================
    # SUMMARY
    # =========================================================================

    def compute_summary(self) -> BudgetSummary:
        """
        Roll up income, expenses and balance over the whole ledger.

        Recomputed on every call; O(n) in the number of transactions.
        """
        income = Decimal("0")
        expenses = Decimal("0")
        with self._lock:
            for transaction in self._transactions:
                if transaction.type == TransactionType.INCOME:
                    income += transaction.amount
                else:
                    expenses += transaction.amount
        return BudgetSummary(
            income=income,
            expenses=expenses,
            balance=income - expenses,
        )

    # =========================================================================
    # INTERNALS (callers hold the lock)
    # =========================================================================

    def _find_transaction_index(self, transaction_id: UUID) -> Optional[int]:
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                return index
        return None

    def _find_goal(self, goal_id: UUID) -> Optional[SavingGoal]:
        for goal in self._profile.saving_goals:
            if goal.id == goal_id:
                return goal
        return None

    def _resolve_linked_goal(self, transaction: Transaction) -> Optional[SavingGoal]:
        """
        Find the goal a funding transaction belongs to.

        An explicit goal_id wins. Without one, a "Saving" transaction is
        matched by the goal name written in its note.
        """
        if transaction.goal_id is not None:
            return self._find_goal(transaction.goal_id)

        if transaction.category != SAVING_CATEGORY:
            return None
        goal_name = parse_funding_note(transaction.note)
        if goal_name is None:
            return None
        for goal in self._profile.saving_goals:
            if goal.name == goal_name:
                return goal
        return None

    @staticmethod
    def _coerce(model, value):
        if isinstance(value, model):
            return model.model_validate(value.model_dump())
        return model.model_validate(dict(value))

    @staticmethod
    def _positive_amount(amount: Union[Decimal, int, str]) -> Decimal:
        try:
            value = Decimal(str(amount))
        except ArithmeticError:
            raise InvalidAmountError(f"Not a number: {amount!r}")
        if not value.is_finite() or value <= 0:
            raise InvalidAmountError(f"Amount must be greater than zero, got {amount}")
        return value


class LedgerError(Exception):
    """Base exception for ledger operations."""
    pass


class InvalidAmountError(LedgerError, ValueError):
    """An amount that must be positive was not."""
    pass
