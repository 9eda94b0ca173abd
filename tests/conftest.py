"""Shared fixtures: an audited, empty store and its event sink."""

from decimal import Decimal

import pytest

from src.audit import AuditLogger
from src.ledger import LedgerStore
from src.services.storage import InMemoryAuditStorage


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage(max_events=200)


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def store(audit_logger):
    return LedgerStore(audit_logger=audit_logger)


@pytest.fixture
def laptop_goal(store):
    """A 10 000 SEK laptop goal with nothing saved yet."""
    return store.add_saving_goal({
        "name": "Laptop",
        "target_amount": Decimal("10000"),
        "saved_amount": Decimal("0"),
    })
