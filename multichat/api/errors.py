"""Error type and handler for the proxy's JSON error responses."""

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class ChatProxyError(Exception):
    """Raised by the chat endpoint to end a request with a JSON error body.

    Attributes:
        status_code: HTTP status of the response.
        error: Short summary placed in the ``error`` field.
        details: Optional payload placed in the ``details`` field.
    """

    def __init__(self, status_code: int, error: str, details: Any = None) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.details = details


async def chat_proxy_error_handler(request: Request, exc: ChatProxyError) -> JSONResponse:
    """Render a ChatProxyError as ``{"error": ..., "details": ...}``."""
    content: dict[str, Any] = {"error": exc.error}
    if exc.details is not None:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)
