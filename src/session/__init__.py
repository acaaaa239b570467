"""Conversation session management and client-side rate limiting.

Framework-independent core of the chat application.

Responsibilities:
    - Rate-gated submission of user turns
    - Incremental assembly of streamed replies into one message
    - Failure classification and quota cooldown
    - Cooperative cancellation of an in-flight reply

Knows nothing about how messages are rendered.
"""

from src.session.config import SessionConfig, get_session_config
from src.session.conversation import ConversationSession, ReplyStream
from src.session.errors import (
    EmptyTurnError,
    ReplyStreamError,
    SessionBusyError,
    SessionError,
    classify_failure,
)
from src.session.rate_gate import Admission, RateGate, get_rate_gate

__all__ = [
    "Admission",
    "ConversationSession",
    "EmptyTurnError",
    "RateGate",
    "ReplyStream",
    "ReplyStreamError",
    "SessionBusyError",
    "SessionConfig",
    "SessionError",
    "classify_failure",
    "get_rate_gate",
    "get_session_config",
]
