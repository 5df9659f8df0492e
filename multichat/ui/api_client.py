"""HTTP client for the streaming chat proxy."""

import json
import logging
import os
from collections.abc import Callable, Sequence

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:8000"


def describe_error_response(response: httpx.Response) -> str:
    """Turn a JSON error response from the proxy into a readable message."""
    try:
        data = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        data = None

    if isinstance(data, dict) and data.get("error"):
        message = str(data["error"])
        details = data.get("details")
        if isinstance(details, dict) and details.get("error"):
            details = details["error"]
            if isinstance(details, dict):
                details = details.get("message", details)
        if isinstance(details, str) and details:
            message = f"{message}: {details}"
    else:
        message = response.reason_phrase or "Request failed"
    return f"{message} (HTTP {response.status_code})"


class ChatApiClient:
    """Consumes the chunked reply of POST /api/chat.

    Each call opens its own connection; the client keeps no state between
    turns.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = 120.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Where the proxy endpoint is served. Defaults to
                API_BASE_URL, read when the client is created.
            timeout: Seconds allowed per network operation.
            transport: Optional httpx transport (tests route to the ASGI app).
        """
        base_url = base_url or os.getenv("API_BASE_URL", DEFAULT_API_BASE_URL)
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport

    async def stream_chat(
        self,
        messages: Sequence[dict[str, str]],
        on_start: Callable[[], None],
        on_chunk: Callable[[str], None],
        on_complete: Callable[[], None],
        on_error: Callable[[str], None],
    ) -> None:
        """Post the conversation and report the reply through callbacks.

        Exactly one of ``on_complete`` or ``on_error`` is called. ``on_start``
        is called once the proxy has accepted the request, before the first
        chunk.
        """
        async with httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        ) as client:
            try:
                async with client.stream(
                    "POST",
                    "/api/chat",
                    json={"messages": list(messages)},
                    headers={"Accept": "text/plain"},
                ) as response:
                    if response.is_error:
                        await response.aread()
                        on_error(describe_error_response(response))
                        return
                    on_start()
                    async for text in response.aiter_text():
                        if text:
                            on_chunk(text)
            except httpx.HTTPError as e:
                logger.warning(f"Chat stream failed: {e!r}")
                on_error(f"Connection failed: {str(e) or type(e).__name__}")
                return
        on_complete()
