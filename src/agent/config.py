"""Agent configuration with environment variable loading.

Pydantic-based configuration for the Gemini chat agent.
Generation defaults match the values the chat app has always used.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()


class AgentConfig(BaseModel):
    """Configuration for the Gemini chat agent.

    Attributes:
        api_key: API key for model access.
        model_name: Gemini model identifier.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        top_k: Number of highest-probability tokens considered per step.
        top_p: Nucleus sampling probability mass.
        max_output_tokens: Maximum tokens in generated response.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY", os.getenv("GOOGLE_API_KEY", "")),
        description="API key for the Gemini API",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("LLM_MODEL", "gemini-1.5-pro"),
        description="Model to use",
    )
    temperature: float = Field(
        default=0.9,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    top_k: int = Field(
        default=1,
        ge=1,
        description="Top-k sampling cutoff",
    )
    top_p: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Top-p (nucleus) sampling cutoff",
    )
    max_output_tokens: int = Field(
        default=2048,
        ge=1,
        le=8192,
        description="Maximum tokens in generated response",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set GEMINI_API_KEY or GOOGLE_API_KEY in .env"
            )
        return v.strip()


def get_agent_config() -> AgentConfig:
    """Create agent configuration from environment.

    Returns:
        Configured AgentConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return AgentConfig()
