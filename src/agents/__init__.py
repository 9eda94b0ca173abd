"""AI Agents package."""

from src.agents.cashbuddy import (
    GENERIC_ERROR_MESSAGE,
    GREETING,
    INVALID_KEY_MESSAGE,
    MISSING_KEY_MESSAGE,
    CashBuddyAgent,
    ChatServiceError,
)

__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "GREETING",
    "INVALID_KEY_MESSAGE",
    "MISSING_KEY_MESSAGE",
    "CashBuddyAgent",
    "ChatServiceError",
]
