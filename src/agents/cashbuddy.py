"""
CashBuddy Chat Agent

DESIGN DECISION: The assistant is a thin wrapper around one Gemini call
per chat turn. The whole transcript is sent every time; there is no
server-side chat session to keep in sync.

CRITICAL BOUNDARIES:
- The agent NEVER reads or writes the ledger. It only sees the chat.
- The agent NEVER raises to the UI. Every failure becomes a short,
  friendly message the user can read in the chat.

FAILURE HANDLING:
1. No API key configured  -> tell the user the key is missing
2. Key rejected by Google -> tell the user the key is wrong
3. Transient API errors   -> retried with backoff, then a generic apology
4. Anything else          -> a generic apology
"""

from collections.abc import Sequence
from typing import Any, Optional

import google.generativeai as genai
import structlog
from google.api_core import exceptions as google_exceptions
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.audit import AuditLogger
from src.config import GeminiSettings, get_settings
from src.models.chat import ChatMessage, ChatRole


logger = structlog.get_logger(__name__)


SYSTEM_INSTRUCTION = """You are "CashBuddy", a direct and helpful AI financial assistant for students in Sweden. Your primary goal is to help users solve their financial questions through a clear, step-by-step conversation.

Your personality:
- Straightforward and to the point.
- Encouraging and positive.
- Use emojis to keep the tone friendly. 👍

Your communication style:
- Use plenty of line breaks and bullet points so answers are easy to read.
- Be concise. No filler text.

How to answer questions, especially about saving goals:
1. Acknowledge & gather facts: when a user asks how to save for something (e.g. a laptop), first state what you know, like the item's approximate cost.
2. Ask clarifying questions: ask for the information you need before giving a plan, e.g. "How much is your monthly income (e.g. from CSN)?" or "How much does the item cost?".
3. Calculate & plan: once you have the numbers, create a simple, clear savings plan.
4. Suggest & encourage: offer encouragement and, where relevant, cheaper alternatives.
5. Keep the conversation going: end with a follow-up question.

VERY IMPORTANT RULE:
If the user's message includes a phrase like "svara bara på frågan", "only answer this" or a similar direct command, skip the questions and give a single, direct answer based on what you know.
"""

GREETING = (
    "Hej där! Jag är CashBuddy, din AI-finansiella assistent. "
    "Be mig om spartips, budgetråd eller hjälp med att hantera studentekonomin!"
)

MISSING_KEY_MESSAGE = (
    "The Gemini API key is not configured. "
    "Please set the GEMINI_API_KEY environment variable."
)
INVALID_KEY_MESSAGE = (
    "There seems to be an issue with the API key. Please check the configuration."
)
GENERIC_ERROR_MESSAGE = (
    "Sorry, something went wrong while getting your tip. Please try again."
)

TRANSIENT_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.TooManyRequests,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
)


class ChatServiceError(Exception):
    """The completion API did not produce a usable answer."""
    pass


class CashBuddyAgent:
    """
    Chat completion collaborator backed by Gemini.

    RESPONSIBILITIES:
    - Turn the transcript into Gemini contents
    - Return one reply text per call
    - Substitute a fallback text on any failure
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        """
        Initialize the agent.

        Args:
            settings: Gemini settings; loaded from the environment if None.
            model: Pre-built generative model (tests pass a fake here).
            audit_logger: Records responses and fallbacks.
        """
        self._settings = settings or get_settings().gemini
        self._audit_logger = audit_logger
        self._model = model
        if self._model is None and self._settings.is_configured:
            self._configure_genai()

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        self._model = genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "top_p": self._settings.top_p,
                "top_k": self._settings.top_k,
                "max_output_tokens": self._settings.max_tokens,
            },
            system_instruction=SYSTEM_INSTRUCTION,
        )

    @property
    def is_configured(self) -> bool:
        return self._model is not None

    @staticmethod
    def to_contents(history: Sequence[ChatMessage]) -> list[dict]:
        """Convert the transcript into Gemini's role/parts format, in order."""
        return [
            {"role": ChatRole(message.role).value, "parts": [message.text]}
            for message in history
        ]

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _generate(self, contents: list[dict]) -> str:
        """One completion call. Transient Google errors are retried."""
        response = await self._model.generate_content_async(contents)
        try:
            text = response.text
        except ValueError as e:
            # Raised by the SDK when the candidate was blocked or empty
            raise ChatServiceError(f"No usable response: {e}") from e
        if not text or not text.strip():
            raise ChatServiceError("Empty response from model")
        return text.strip()

    async def get_response(self, history: Sequence[ChatMessage]) -> str:
        """
        Get CashBuddy's reply to the conversation so far.

        Never raises: failures are turned into a fallback text.
        """
        if not self.is_configured:
            logger.warning("gemini_not_configured")
            self._log_fallback("missing_api_key")
            return MISSING_KEY_MESSAGE

        try:
            text = await self._generate(self.to_contents(history))
        except Exception as e:
            logger.error("gemini_request_failed", error=str(e), error_type=type(e).__name__)
            if self._audit_logger:
                self._audit_logger.log_external_service_error(
                    service="gemini",
                    error_message=str(e),
                )
            if "API key not valid" in str(e):
                self._log_fallback("invalid_api_key")
                return INVALID_KEY_MESSAGE
            self._log_fallback(type(e).__name__)
            return GENERIC_ERROR_MESSAGE

        if self._audit_logger:
            self._audit_logger.log_chat_response(message_count=len(history))
        return text

    def _log_fallback(self, reason: str) -> None:
        if self._audit_logger:
            self._audit_logger.log_chat_fallback(reason=reason)
