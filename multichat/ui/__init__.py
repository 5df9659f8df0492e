"""NiceGUI interface - thin visualization layer for chat interactions.

Responsibilities:
    - Login prompt capturing a local display identity
    - Chat message display with streaming updates
    - Inline, dismissible error notices

Conversation state lives in ``ConversationClient``; the page only renders
it and forwards user actions. All model calls go through the API.
"""
