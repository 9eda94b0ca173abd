"""
Data Models Package

This package contains all Pydantic models used in CashBuddy.
All data flowing through the store must conform to these schemas.
"""

from src.models.ledger import (
    FUNDING_NOTE_PATTERN,
    SAVING_CATEGORY,
    Badge,
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
from src.models.community import Deal, Post
from src.models.chat import ChatMessage, ChatRole
from src.models.forms import ValidationIssue, ValidationResult
from src.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Ledger models
    "FUNDING_NOTE_PATTERN",
    "SAVING_CATEGORY",
    "Badge",
    "BudgetSummary",
    "GoalName",
    "ProfileData",
    "SavingGoal",
    "SavingGoalInput",
    "Transaction",
    "TransactionInput",
    "TransactionType",
    "format_funding_note",
    "parse_funding_note",
    # Community models
    "Deal",
    "Post",
    # Chat models
    "ChatMessage",
    "ChatRole",
    # Form models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
