"""Unit tests for individual components in isolation.

Ensures fast execution with minimal dependencies.

Coverage:
    - session/: Rate gate, conversation streaming, failure classification
    - agent/: Agent configuration and fragment extraction
    - models/: Pydantic validation of turns and reply events
    - ui/: Markdown rendering

Uses scripted fake models and a manual clock instead of live services.
"""
