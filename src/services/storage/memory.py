"""
In-Memory Audit Storage

Keeps audit events for the lifetime of the process. Nothing is written
to disk: all data resets when the app restarts.

TRADEOFFS:
- Bounded: once `max_events` is reached the oldest events are dropped
- Lookups are linear scans (fine for one user's session)
"""

from collections import deque
from threading import Lock
from uuid import UUID

from src.models.audit import AuditEvent
from src.services.storage.interface import AuditStorageInterface


class InMemoryAuditStorage(AuditStorageInterface):
    """Bounded, append-only audit log held in memory."""

    def __init__(self, max_events: int = 1000):
        if max_events < 1:
            raise ValueError(f"max_events must be positive, got {max_events}")
        self._events: deque[AuditEvent] = deque(maxlen=max_events)
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._events)

    def append_event(self, event: AuditEvent) -> bool:
        with self._lock:
            self._events.append(event)
        return True

    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        with self._lock:
            return [e for e in self._events if e.correlation_id == correlation_id]

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: UUID,
    ) -> list[AuditEvent]:
        with self._lock:
            return [
                e for e in self._events
                if e.entity_type == entity_type and e.entity_id == entity_id
            ]

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        with self._lock:
            events = list(self._events)
        events.reverse()
        return events[:limit]
