"""Agno agent logic for Gemini streaming.

Provides the remote model capability used by conversation sessions.

Responsibilities:
    - Agent initialization with the Gemini model
    - Generation settings (temperature, top-k, top-p, output tokens)
    - Conversion of session turns into model context
    - Streaming text fragment extraction

Leverages the Agno framework for model access.
Maintains clean separation from the session and UI layers.
"""

from src.agent.chat_agent import AgentService, get_agent_service
from src.agent.config import AgentConfig, get_agent_config

__all__ = ["AgentConfig", "AgentService", "get_agent_config", "get_agent_service"]
