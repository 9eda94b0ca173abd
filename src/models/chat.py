"""Chat transcript models."""

from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class ChatRole(str, Enum):
    """Speaker of a chat message, using the completion API's role names."""
    USER = "user"
    MODEL = "model"


class ChatMessage(BaseModel):
    """One turn of the CashBuddy conversation."""

    id: UUID = Field(default_factory=uuid4)
    role: ChatRole
    text: str
