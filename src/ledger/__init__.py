"""Ledger & Goals Store package."""

from src.ledger.store import InvalidAmountError, LedgerError, LedgerStore

__all__ = ["InvalidAmountError", "LedgerError", "LedgerStore"]
