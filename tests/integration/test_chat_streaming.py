"""Integration tests for streaming chat against the live Gemini API.

No mocks - uses a real AgentService behind a ConversationSession.

Requirements:
    - GEMINI_API_KEY (or GOOGLE_API_KEY) environment variable
    - Tests are skipped without a key
"""

import os

import pytest

from src.agent.chat_agent import AgentService
from src.agent.config import AgentConfig
from src.models.schemas import Delta, Role
from src.session.config import SessionConfig
from src.session.conversation import ConversationSession
from src.session.rate_gate import RateGate


def has_gemini_key() -> bool:
    """Check if a Gemini API key is configured."""
    key = os.environ.get("GEMINI_API_KEY") or os.environ.get("GOOGLE_API_KEY", "")
    return bool(key and not key.isspace())


requires_api_key = pytest.mark.skipif(
    not has_gemini_key(),
    reason="GEMINI_API_KEY not set - skipping LLM integration test",
)


@requires_api_key
class TestLiveStreaming:
    """End-to-end reply streaming through the session."""

    @pytest.fixture
    def session(self) -> ConversationSession:
        service = AgentService(
            config=AgentConfig(model_name=os.getenv("LLM_MODEL", "gemini-1.5-flash"))
        )
        return ConversationSession(
            service,
            rate_gate=RateGate(max_requests=5, window_seconds=60.0),
            config=SessionConfig(greeting=""),
        )

    async def test_reply_streams_and_completes(self, session: ConversationSession) -> None:
        """Reply arrives as deltas ending in a completed delta."""
        events = [e async for e in session.submit_turn("Count from 1 to 5.")]

        assert events, "Expected at least one event"
        final = events[-1]
        assert isinstance(final, Delta)
        assert final.in_progress is False
        assert final.text

        for earlier in events[:-1]:
            assert isinstance(earlier, Delta)
            assert earlier.in_progress is True
            assert final.text.startswith(earlier.text)

    async def test_history_records_both_turns(self, session: ConversationSession) -> None:
        [e async for e in session.submit_turn("Say the word 'hello' and nothing else")]

        roles = [t.role for t in session.history]
        assert roles == [Role.USER, Role.ASSISTANT]
        assert "hello" in session.history[-1].text.lower()

    async def test_follow_up_uses_context(self, session: ConversationSession) -> None:
        """Second turn can refer to the first."""
        [e async for e in session.submit_turn("My favourite colour is teal. Reply with OK.")]
        [e async for e in session.submit_turn("What is my favourite colour? One word.")]

        assert "teal" in session.history[-1].text.lower()
