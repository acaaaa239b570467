"""Test package for Gemini Chat.

Structure:
    - unit/: Individual function and class tests
    - integration/: End-to-end tests against the live model
"""
