"""Gemini Chat - streaming chat with client-side rate limiting.

Combines Agno for Gemini model access, NiceGUI for the chat interface,
and Pydantic for configuration and event models.

Components:
    - session: Conversation state, rate gate, reply streaming
    - agent: Gemini model capability
    - ui: Web interface for chat interactions
    - models: Turn and reply event schemas
"""

__version__ = "0.1.0"
