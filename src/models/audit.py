"""
Audit Models for CashBuddy

Every change to the ledger or the profile is recorded as an audit event.
This provides:
1. Traceability of how a balance or a goal got where it is
2. Debugging information when a goal link is missed
3. A recent-activity list for the user

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ledger
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_EDITED = "transaction_edited"
    TRANSACTION_DELETED = "transaction_deleted"

    # Saving goals
    GOAL_ADDED = "goal_added"
    GOAL_RENAMED = "goal_renamed"
    GOAL_DELETED = "goal_deleted"
    GOAL_FUNDED = "goal_funded"
    GOAL_FUNDING_REVERSED = "goal_funding_reversed"
    GOAL_LINK_MISSED = "goal_link_missed"

    # Profile and community
    PROFILE_UPDATED = "profile_updated"
    POST_ADDED = "post_added"

    # Chat
    CHAT_RESPONSE_GENERATED = "chat_response_generated"
    CHAT_FALLBACK_USED = "chat_fallback_used"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every mutation of the store creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'goal', 'chat')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., a funding and its transaction)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction_id, "expense", "Food", "120")
        event = AuditEventBuilder.goal_funded(goal_id, "Laptop", "500", transaction_id)
    """

    @staticmethod
    def transaction_added(
        transaction_id: UUID,
        transaction_type: str,
        category: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction added: {transaction_type} {amount} ({category})",
            details={
                "type": transaction_type,
                "category": category,
                "amount": str(amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_edited(
        transaction_id: UUID,
        changes: dict[str, Any],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_EDITED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction edited: {', '.join(sorted(changes)) or 'no changes'}",
            details={"changes": changes},
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: UUID,
        amount: Decimal,
        category: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=transaction_id,
            description=f"Transaction deleted: {amount} ({category})",
            details={
                "amount": str(amount),
                "category": category,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_added(
        goal_id: UUID,
        name: str,
        target_amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_ADDED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Saving goal added: {name}",
            details={
                "name": name,
                "target_amount": str(target_amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_renamed(
        goal_id: UUID,
        old_name: str,
        new_name: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_RENAMED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Saving goal renamed: {old_name} -> {new_name}",
            details={
                "old_name": old_name,
                "new_name": new_name,
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_deleted(
        goal_id: UUID,
        name: str,
        saved_amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_DELETED,
            entity_type="goal",
            entity_id=goal_id,
            description=f"Saving goal deleted: {name}",
            details={
                "name": name,
                "saved_amount": str(saved_amount),
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_funded(
        goal_id: UUID,
        name: str,
        amount: Decimal,
        transaction_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_FUNDED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=transaction_id,
            description=f"Added {amount} to saving goal: {name}",
            details={
                "name": name,
                "amount": str(amount),
                "transaction_id": str(transaction_id),
            },
            is_user_action=True,
        )

    @staticmethod
    def goal_funding_reversed(
        goal_id: UUID,
        name: str,
        amount: Decimal,
        transaction_id: UUID,
        saved_amount: Decimal,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_FUNDING_REVERSED,
            entity_type="goal",
            entity_id=goal_id,
            correlation_id=transaction_id,
            description=f"Reversed {amount} from saving goal: {name}",
            details={
                "name": name,
                "amount": str(amount),
                "saved_amount": str(saved_amount),
            },
        )

    @staticmethod
    def goal_link_missed(
        transaction_id: UUID,
        goal_reference: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.GOAL_LINK_MISSED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=transaction_id,
            description="Funding transaction deleted but its saving goal no longer exists",
            details={"goal_reference": goal_reference},
        )

    @staticmethod
    def profile_updated(fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PROFILE_UPDATED,
            entity_type="profile",
            description=f"Profile updated: {', '.join(fields) or 'no fields'}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def post_added(post_id: UUID, author: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.POST_ADDED,
            entity_type="post",
            entity_id=post_id,
            description=f"Community post added by {author}",
            details={"author": author},
            is_user_action=True,
        )

    @staticmethod
    def chat_response_generated(
        message_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_RESPONSE_GENERATED,
            entity_type="chat",
            correlation_id=correlation_id,
            description=f"Chat response generated from {message_count} messages",
            details={"message_count": message_count},
        )

    @staticmethod
    def chat_fallback_used(
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CHAT_FALLBACK_USED,
            severity=AuditSeverity.WARNING,
            entity_type="chat",
            correlation_id=correlation_id,
            description=f"Chat fallback used: {reason}",
            details={"reason": reason},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={
                "service": service,
            },
            correlation_id=correlation_id,
        )
