"""Integration tests for components working together as a system.

Coverage:
    - POST /api/chat through the real FastAPI app and OpenAI SDK
    - Conversation client streaming from the app over ASGI

The remote completion API is the in-process fake from conftest.py, so
these run without an API key.
"""
