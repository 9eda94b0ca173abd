"""
Main Orchestrator for CashBuddy

This module ties together all the components and defines:
1. The chat flow (transcript -> Gemini -> reply)
2. The factory that builds one session's worth of components

DESIGN DECISION: Everything built here lives for one UI session.
There is no persistence: a new session starts from the seed data.

The chat flow and the ledger never touch each other. A pending chat
call cannot race with a store mutation.
"""

from typing import NamedTuple, Optional
from uuid import UUID

import structlog

from src.agents import GREETING, CashBuddyAgent
from src.audit import AuditLogger, create_correlation_id
from src.community import CommunityFeed, DealsCatalog
from src.config import Settings, get_settings
from src.data import load_seed
from src.ledger import LedgerStore
from src.models.chat import ChatMessage, ChatRole
from src.services.storage import InMemoryAuditStorage


logger = structlog.get_logger(__name__)


CONNECTION_ERROR_MESSAGE = (
    "Sorry, I'm having trouble connecting right now. Please try again later."
)


def greeting_message() -> ChatMessage:
    return ChatMessage(role=ChatRole.MODEL, text=GREETING)


class ChatFlow:
    """
    Orchestrates one CashBuddy conversation.

    Flow:
    1. User message is appended to the transcript
    2. The whole transcript goes to the agent
    3. The reply (or a fallback) is appended

    The transcript always starts with CashBuddy's greeting.
    """

    def __init__(
        self,
        agent: Optional[CashBuddyAgent] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._agent = agent or CashBuddyAgent(audit_logger=audit_logger)
        self._audit_logger = audit_logger
        self._messages: list[ChatMessage] = [greeting_message()]

    @property
    def messages(self) -> list[ChatMessage]:
        return [m.model_copy() for m in self._messages]

    async def send_message(
        self,
        text: str,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[ChatMessage]:
        """
        Send a user message and wait for CashBuddy's reply.

        Blank messages are ignored (returns None).

        Returns:
            The reply appended to the transcript.
        """
        if not text or not text.strip():
            return None
        correlation_id = correlation_id or create_correlation_id()

        self._messages.append(ChatMessage(role=ChatRole.USER, text=text))
        history = list(self._messages)

        try:
            reply_text = await self._agent.get_response(history)
        except Exception as e:
            # The agent should never raise; if it does, the chat still answers
            logger.error("chat_flow_failed", error=str(e), correlation_id=str(correlation_id))
            if self._audit_logger:
                self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            reply_text = CONNECTION_ERROR_MESSAGE

        reply = ChatMessage(role=ChatRole.MODEL, text=reply_text)
        self._messages.append(reply)
        return reply.model_copy()

    def clear(self) -> None:
        """Reset the conversation to the greeting."""
        self._messages = [greeting_message()]


class AppComponents(NamedTuple):
    store: LedgerStore
    feed: CommunityFeed
    deals: DealsCatalog
    chat: ChatFlow
    audit_logger: AuditLogger


def create_app_components(
    settings: Optional[Settings] = None,
    agent: Optional[CashBuddyAgent] = None,
) -> AppComponents:
    """
    Factory function to create one session's components.

    Args:
        settings: Settings to use; loaded from the environment if None.
        agent: Chat agent to use; built from the Gemini settings if None.

    Returns:
        AppComponents(store, feed, deals, chat, audit_logger)
    """
    settings = settings or get_settings()
    app_settings = settings.app

    audit_storage = InMemoryAuditStorage(max_events=app_settings.audit_max_events)
    audit_logger = AuditLogger(audit_storage)

    seed = load_seed()

    store = LedgerStore(profile=seed.profile, audit_logger=audit_logger)
    feed = CommunityFeed(seed.posts, audit_logger=audit_logger)
    deals = DealsCatalog(seed.deals)

    if agent is None:
        agent = CashBuddyAgent(settings=settings.gemini, audit_logger=audit_logger)
    chat = ChatFlow(agent=agent, audit_logger=audit_logger)

    return AppComponents(
        store=store,
        feed=feed,
        deals=deals,
        chat=chat,
        audit_logger=audit_logger,
    )
