"""FastAPI endpoints for the chat proxy.

Stateless HTTP routes with async request handling. Replies are streamed as
chunked plain text relayed from the remote completion API.

Endpoints:
    - GET /health: Service health status
    - POST /api/chat: Streamed completion for a conversation
"""
