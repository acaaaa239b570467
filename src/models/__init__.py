"""Pydantic models for transcript turns and reply events.

Provides type safety and validation for everything that crosses the
session boundary.

Models:
    - Turn: Completed message in the conversation
    - ActiveReply: Assistant reply being assembled from a stream
    - Delta / Rejected / Failed / Cancelled: ReplyEvent variants
"""

from src.models.schemas import (
    ActiveReply,
    Cancelled,
    Delta,
    Failed,
    FailureKind,
    Rejected,
    ReplyEvent,
    Role,
    Turn,
)

__all__ = [
    "ActiveReply",
    "Cancelled",
    "Delta",
    "Failed",
    "FailureKind",
    "Rejected",
    "ReplyEvent",
    "Role",
    "Turn",
]
