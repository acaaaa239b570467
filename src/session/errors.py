"""Session error types and model failure classification."""

from agno.exceptions import ModelProviderError

from src.models.schemas import FailureKind

QUOTA_STATUS_CODE = 429

# Substrings providers use when a project runs out of quota or credit
_QUOTA_MARKERS = (
    "quota",
    "resource_exhausted",
    "resource exhausted",
    "billing",
    "rate limit",
)

FAILURE_MESSAGES: dict[FailureKind, str] = {
    FailureKind.TRANSIENT: "Sorry, there was an error. Please try again.",
    FailureKind.QUOTA_EXCEEDED: (
        "The model's usage quota is exhausted. Please try again in a few minutes."
    ),
}


class SessionError(Exception):
    """Base class for conversation session errors."""


class EmptyTurnError(SessionError, ValueError):
    """Raised when a submitted turn is empty or whitespace only."""


class SessionBusyError(SessionError, RuntimeError):
    """Raised when a turn is submitted while a reply is still streaming."""


class ReplyStreamError(SessionError):
    """Raised by a model adapter when the remote run reports an error.

    Attributes:
        status_code: HTTP status of the failed provider call, if known.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _status_of(exc: BaseException) -> int | None:
    for attr in ("status_code", "code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_failure(exc: BaseException) -> FailureKind:
    """Decide whether a stream failure means quota exhaustion.

    Args:
        exc: Exception raised while opening or consuming the reply stream.

    Returns:
        FailureKind.QUOTA_EXCEEDED for HTTP 429 or quota/billing wording,
        FailureKind.TRANSIENT for everything else.
    """
    if isinstance(exc, ModelProviderError) and exc.status_code == QUOTA_STATUS_CODE:
        return FailureKind.QUOTA_EXCEEDED

    if _status_of(exc) == QUOTA_STATUS_CODE:
        return FailureKind.QUOTA_EXCEEDED

    text = str(exc).lower()
    if any(marker in text for marker in _QUOTA_MARKERS):
        return FailureKind.QUOTA_EXCEEDED

    return FailureKind.TRANSIENT
