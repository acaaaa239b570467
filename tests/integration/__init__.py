"""Integration tests for components working together as a system.

No mocks for core functionality - tests real interactions.

Coverage:
    - ConversationSession driving a live AgentService
    - Multi-turn context carried between submissions

Requires a Gemini API key. Slower than unit tests but provides higher confidence.
"""
