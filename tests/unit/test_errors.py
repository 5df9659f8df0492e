"""Unit tests for the proxy's JSON error rendering."""

import json

import pytest_check as check
from fastapi import Request

from multichat.api.errors import ChatProxyError, chat_proxy_error_handler


def _request() -> Request:
    return Request({"type": "http", "method": "POST", "path": "/api/chat", "headers": []})


class TestChatProxyErrorHandler:
    async def test_renders_error_and_details(self) -> None:
        exc = ChatProxyError(429, "Error from completion API", {"error": "rate_limited"})

        response = await chat_proxy_error_handler(_request(), exc)

        check.equal(response.status_code, 429)
        check.equal(
            json.loads(response.body),
            {"error": "Error from completion API", "details": {"error": "rate_limited"}},
        )

    async def test_omits_details_when_absent(self) -> None:
        response = await chat_proxy_error_handler(
            _request(), ChatProxyError(500, "An error occurred")
        )

        check.equal(response.status_code, 500)
        check.equal(json.loads(response.body), {"error": "An error occurred"})
