"""
CashBuddy - Source Package

A personal-finance companion for students: a ledger with saving goals,
a community feed, student deals and an AI chat assistant.

DESIGN PRINCIPLES:
1. One store owns the ledger and the profile
2. Funding a goal and undoing it are always paired
3. Unknown ids are no-ops, never crashes
4. The chat assistant never touches the money
5. Every change is audited
"""

__version__ = "1.0.0"
__author__ = "CashBuddy Team"
