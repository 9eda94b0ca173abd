"""
Tests for the CashBuddy chat agent

No real API calls: a fake model stands in for Gemini.
"""

import pytest
from google.api_core import exceptions as google_exceptions
from tenacity import wait_none

from src.agents import (
    GENERIC_ERROR_MESSAGE,
    INVALID_KEY_MESSAGE,
    MISSING_KEY_MESSAGE,
    CashBuddyAgent,
)
from src.config import GeminiSettings
from src.models.audit import AuditEventType
from src.models.chat import ChatMessage, ChatRole


class FakeResponse:
    def __init__(self, text=None, blocked=False):
        self._text = text
        self._blocked = blocked

    @property
    def text(self):
        if self._blocked:
            raise ValueError("The response was blocked")
        return self._text


class FakeModel:
    """Replays a scripted list of responses or exceptions."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def generate_content_async(self, contents):
        self.calls.append(contents)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture(autouse=True)
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(CashBuddyAgent._generate.retry, "wait", wait_none())


@pytest.fixture
def settings(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return GeminiSettings(_env_file=None)


@pytest.fixture
def history():
    return [
        ChatMessage(role=ChatRole.MODEL, text="Hej!"),
        ChatMessage(role=ChatRole.USER, text="How do I save for a laptop?"),
    ]


class TestContents:
    """Tests for transcript conversion."""

    def test_to_contents_keeps_order_and_roles(self, history):
        contents = CashBuddyAgent.to_contents(history)
        assert contents == [
            {"role": "model", "parts": ["Hej!"]},
            {"role": "user", "parts": ["How do I save for a laptop?"]},
        ]


class TestGetResponse:
    """Tests for replies and fallbacks."""

    @pytest.mark.asyncio
    async def test_reply(self, settings, history, audit_logger, audit_storage):
        model = FakeModel(FakeResponse("  Save 500 SEK a month 💻  "))
        agent = CashBuddyAgent(settings=settings, model=model, audit_logger=audit_logger)

        reply = await agent.get_response(history)

        assert reply == "Save 500 SEK a month 💻"
        assert model.calls[0][-1]["parts"] == ["How do I save for a laptop?"]
        event = audit_storage.get_recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.CHAT_RESPONSE_GENERATED
        assert event.details["message_count"] == 2

    @pytest.mark.asyncio
    async def test_missing_key(self, monkeypatch, history, audit_logger, audit_storage):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        monkeypatch.delenv("API_KEY", raising=False)
        agent = CashBuddyAgent(settings=GeminiSettings(_env_file=None), audit_logger=audit_logger)

        assert agent.is_configured is False
        assert await agent.get_response(history) == MISSING_KEY_MESSAGE
        event = audit_storage.get_recent_events(limit=1)[0]
        assert event.event_type == AuditEventType.CHAT_FALLBACK_USED
        assert event.details["reason"] == "missing_api_key"

    @pytest.mark.asyncio
    async def test_invalid_key(self, settings, history):
        model = FakeModel(google_exceptions.InvalidArgument(
            "API key not valid. Please pass a valid API key."
        ))
        agent = CashBuddyAgent(settings=settings, model=model)

        assert await agent.get_response(history) == INVALID_KEY_MESSAGE
        assert len(model.calls) == 1

    @pytest.mark.asyncio
    async def test_generic_error(self, settings, history, audit_logger, audit_storage):
        model = FakeModel(RuntimeError("boom"))
        agent = CashBuddyAgent(settings=settings, model=model, audit_logger=audit_logger)

        assert await agent.get_response(history) == GENERIC_ERROR_MESSAGE
        types = [e.event_type for e in audit_storage.get_recent_events()]
        assert AuditEventType.EXTERNAL_SERVICE_ERROR in types
        assert AuditEventType.CHAT_FALLBACK_USED in types

    @pytest.mark.asyncio
    async def test_blocked_response(self, settings, history):
        agent = CashBuddyAgent(settings=settings, model=FakeModel(FakeResponse(blocked=True)))
        assert await agent.get_response(history) == GENERIC_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_empty_response(self, settings, history):
        agent = CashBuddyAgent(settings=settings, model=FakeModel(FakeResponse("   ")))
        assert await agent.get_response(history) == GENERIC_ERROR_MESSAGE

    @pytest.mark.asyncio
    async def test_transient_error_is_retried(self, settings, history):
        model = FakeModel(
            google_exceptions.ServiceUnavailable("overloaded"),
            google_exceptions.TooManyRequests("slow down"),
            FakeResponse("Third time lucky"),
        )
        agent = CashBuddyAgent(settings=settings, model=model)

        assert await agent.get_response(history) == "Third time lucky"
        assert len(model.calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_three_attempts(self, settings, history):
        model = FakeModel(*[google_exceptions.ServiceUnavailable("down")] * 3)
        agent = CashBuddyAgent(settings=settings, model=model)

        assert await agent.get_response(history) == GENERIC_ERROR_MESSAGE
        assert len(model.calls) == 3


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
