"""
Abstract Audit Storage Interface

DESIGN DECISION: The audit logger writes through an abstract sink.
This allows us to:
1. Keep a recent-activity list in memory for the UI
2. Use a recording sink in tests
3. Add a durable backend later without touching the store

The interface is intentionally small. Audit logs are append-only:
there is no update or delete.
"""

from abc import ABC, abstractmethod
from uuid import UUID

from src.models.audit import AuditEvent


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Args:
            event: The audit event to log

        Returns:
            True if logged successfully

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one goal funding).

        Returns:
            List of related events in chronological order
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Args:
            entity_type: Type of entity (e.g., 'transaction', 'goal')
            entity_id: The entity's ID

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass
