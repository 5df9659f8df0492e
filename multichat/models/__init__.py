"""Pydantic models for API requests, responses and client state.

Provides type safety, validation, and automatic OpenAPI documentation.

Models:
    - ChatMessage: Message accepted by the proxy endpoint
    - ChatRequest: Incoming POST /api/chat payload
    - ErrorResponse: JSON error body
    - Message: Message held by the conversation client
    - LocalIdentity: Display identity kept in browser storage
"""

from multichat.models.schemas import (
    ChatMessage,
    ChatRequest,
    ErrorResponse,
    LocalIdentity,
    Message,
    Role,
)

__all__ = [
    "ChatMessage",
    "ChatRequest",
    "ErrorResponse",
    "LocalIdentity",
    "Message",
    "Role",
]
