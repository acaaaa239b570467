"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Transcript display with streaming updates
    - Markdown rendering for assistant messages
    - Disabling input while a reply streams, stop and new-chat controls
    - Surfacing rate-limit waits and errors as notifications

Contains no business logic. Delegates everything to ConversationSession.
"""
