from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Speaker of a transcript turn."""

    USER = "user"
    ASSISTANT = "assistant"


class FailureKind(str, Enum):
    """Classification of a failed reply stream."""

    QUOTA_EXCEEDED = "quota_exceeded"
    TRANSIENT = "transient"


class Turn(BaseModel):
    """A completed message in the conversation.

    Attributes:
        role: Who said it.
        text: The message text.
        created_at: Local time the turn was recorded.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    text: str
    created_at: datetime = Field(default_factory=datetime.now)


class ActiveReply(BaseModel):
    """The assistant reply currently being assembled from a stream."""

    text: str = ""
    in_progress: bool = True

    def append(self, fragment: str) -> str:
        self.text += fragment
        return self.text

    def to_turn(self) -> Turn:
        return Turn(role=Role.ASSISTANT, text=self.text)


class Delta(BaseModel):
    """Accumulated reply text so far.

    Attributes:
        text: The full text received up to this point, not just the fragment.
        in_progress: False only on the closing delta of a completed reply.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["delta"] = "delta"
    text: str
    in_progress: bool = True

    @property
    def terminal(self) -> bool:
        return not self.in_progress


class Rejected(BaseModel):
    """Submission refused by the rate gate; no model call was made."""

    model_config = ConfigDict(frozen=True)

    type: Literal["rejected"] = "rejected"
    retry_after_seconds: float = Field(ge=0.0)

    @property
    def terminal(self) -> bool:
        return True


class Failed(BaseModel):
    """Reply stream failed.

    Attributes:
        kind: Quota exhaustion or any other transport failure.
        message: User-facing text appended to the transcript.
        partial_text: Text received before the failure (may be empty).
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["failed"] = "failed"
    kind: FailureKind
    message: str
    partial_text: str = ""

    @property
    def terminal(self) -> bool:
        return True


class Cancelled(BaseModel):
    """Reply stream stopped at the caller's request."""

    model_config = ConfigDict(frozen=True)

    type: Literal["cancelled"] = "cancelled"
    partial_text: str = ""

    @property
    def terminal(self) -> bool:
        return True


ReplyEvent = Annotated[
    Delta | Rejected | Failed | Cancelled,
    Field(discriminator="type"),
]
