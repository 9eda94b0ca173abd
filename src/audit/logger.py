"""
Audit Logger

DESIGN DECISION: Every change to the ledger, the goals and the profile
is logged. This provides:
1. Traceability of balances and goal progress
2. Debugging capability when a goal link is missed
3. A recent-activity list the user can look at

The audit logger:
- Is synchronous, like the store it observes
- Gracefully handles failures (a broken sink never breaks a store operation)
- Supports correlation IDs to trace related events
"""

import logging
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder
from src.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """
    Route structlog output through the stdlib root logger.

    Call once at application start-up.
    """
    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, level.upper(), logging.INFO),
    )


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit sink (for the in-app activity list)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Sink for recent events.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("cashbuddy.audit")

    @property
    def storage(self) -> Optional[AuditStorageInterface]:
        return self._storage

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Appends to the sink if available.

        Returns True if the sink write succeeded (or no sink configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage is not None:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_transaction_added(
        self,
        transaction_id: UUID,
        transaction_type: str,
        category: str,
        amount: Decimal,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            category=category,
            amount=amount,
            correlation_id=correlation_id,
        ))

    def log_transaction_edited(
        self,
        transaction_id: UUID,
        changes: dict[str, Any],
    ) -> None:
        self.log(AuditEventBuilder.transaction_edited(
            transaction_id=transaction_id,
            changes=changes,
        ))

    def log_transaction_deleted(
        self,
        transaction_id: UUID,
        amount: Decimal,
        category: str,
    ) -> None:
        self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            amount=amount,
            category=category,
        ))

    def log_goal_added(
        self,
        goal_id: UUID,
        name: str,
        target_amount: Decimal,
    ) -> None:
        self.log(AuditEventBuilder.goal_added(
            goal_id=goal_id,
            name=name,
            target_amount=target_amount,
        ))

    def log_goal_renamed(
        self,
        goal_id: UUID,
        old_name: str,
        new_name: str,
    ) -> None:
        self.log(AuditEventBuilder.goal_renamed(
            goal_id=goal_id,
            old_name=old_name,
            new_name=new_name,
        ))

    def log_goal_deleted(
        self,
        goal_id: UUID,
        name: str,
        saved_amount: Decimal,
    ) -> None:
        self.log(AuditEventBuilder.goal_deleted(
            goal_id=goal_id,
            name=name,
            saved_amount=saved_amount,
        ))

    def log_goal_funded(
        self,
        goal_id: UUID,
        name: str,
        amount: Decimal,
        transaction_id: UUID,
    ) -> None:
        """Log a funding event; correlated with its transaction."""
        self.log(AuditEventBuilder.goal_funded(
            goal_id=goal_id,
            name=name,
            amount=amount,
            transaction_id=transaction_id,
        ))

    def log_goal_funding_reversed(
        self,
        goal_id: UUID,
        name: str,
        amount: Decimal,
        transaction_id: UUID,
        saved_amount: Decimal,
    ) -> None:
        self.log(AuditEventBuilder.goal_funding_reversed(
            goal_id=goal_id,
            name=name,
            amount=amount,
            transaction_id=transaction_id,
            saved_amount=saved_amount,
        ))

    def log_goal_link_missed(
        self,
        transaction_id: UUID,
        goal_reference: str,
    ) -> None:
        self.log(AuditEventBuilder.goal_link_missed(
            transaction_id=transaction_id,
            goal_reference=goal_reference,
        ))

    def log_profile_updated(self, fields: list[str]) -> None:
        self.log(AuditEventBuilder.profile_updated(fields=fields))

    def log_post_added(self, post_id: UUID, author: str) -> None:
        self.log(AuditEventBuilder.post_added(post_id=post_id, author=author))

    def log_chat_response(
        self,
        message_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.chat_response_generated(
            message_count=message_count,
            correlation_id=correlation_id,
        ))

    def log_chat_fallback(
        self,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.chat_fallback_used(
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log external service error."""
        self.log(AuditEventBuilder.external_service_error(
            service=service,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., one chat turn).
    Pass it through all subsequent operations.
    """
    return uuid4()
