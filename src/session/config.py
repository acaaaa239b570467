"""Session configuration with environment variable loading.

Rate limiting and transcript settings for ConversationSession.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables from .env file
load_dotenv()

DEFAULT_GREETING = "Hello, how can I help you today?"


class SessionConfig(BaseModel):
    """Configuration for conversation sessions and the shared rate gate.

    Attributes:
        max_requests: Admissions allowed per rate-limit window.
        window_seconds: Length of the rate-limit window.
        quota_cooldown_seconds: Lockout applied after the model reports quota exhaustion.
        greeting: Opening assistant message (empty string disables it).
    """

    max_requests: int = Field(
        default_factory=lambda: int(os.getenv("CHAT_RATE_LIMIT_MAX_REQUESTS", "10")),
        ge=1,
        description="Maximum model requests per window",
    )
    window_seconds: float = Field(
        default_factory=lambda: float(os.getenv("CHAT_RATE_LIMIT_WINDOW_SECONDS", "60")),
        gt=0.0,
        description="Rate-limit window length in seconds",
    )
    quota_cooldown_seconds: float = Field(
        default_factory=lambda: float(os.getenv("CHAT_QUOTA_COOLDOWN_SECONDS", "300")),
        ge=0.0,
        description="Lockout after a quota-exceeded failure",
    )
    greeting: str = Field(
        default_factory=lambda: os.getenv("CHAT_GREETING", DEFAULT_GREETING),
        description="Opening assistant message shown to the user",
    )


def get_session_config() -> SessionConfig:
    """Create session configuration from environment.

    Returns:
        Configured SessionConfig instance.

    Raises:
        ValidationError: If an environment value is out of range.
    """
    return SessionConfig()
