"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - remote: Fake chat-completion API recording every request it receives
    - completion_config: Config pointing at the fake remote
    - completion_service: CompletionService wired to the fake remote
    - app: FastAPI app with the service injected
    - async_client: HTTPX client for API testing

The fake remote is an ``httpx.MockTransport`` handed to the OpenAI SDK, so
requests go through the real SDK code path without leaving the process.
"""

import json
from collections.abc import AsyncGenerator, AsyncIterator, Sequence
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from openai import AsyncOpenAI

from multichat.api.app import create_app
from multichat.completion.config import CompletionConfig
from multichat.completion.service import CompletionService

REMOTE_BASE_URL = "http://remote.test/v1"


def _chunk_event(delta: dict[str, Any], finish_reason: str | None = None) -> str:
    chunk = {
        "id": "chatcmpl-test",
        "object": "chat.completion.chunk",
        "created": 0,
        "model": "gpt-test",
        "choices": [{"index": 0, "delta": delta, "finish_reason": finish_reason}],
    }
    return f"data: {json.dumps(chunk)}\n\n"


def sse_body(chunks: Sequence[str]) -> bytes:
    """Encode text chunks the way the remote API streams them."""
    events = [_chunk_event({"role": "assistant", "content": ""})]
    events.extend(_chunk_event({"content": text}) for text in chunks)
    events.append(_chunk_event({}, finish_reason="stop"))
    events.append("data: [DONE]\n\n")
    return "".join(events).encode()


class FakeCompletionAPI:
    """Stands in for the remote chat-completion API.

    Attributes:
        requests: Decoded JSON bodies received, in order.
        chunks: Text deltas streamed back on success.
        error: Optional (status, payload) returned instead of a stream.
        unreachable: When True, every request fails to connect.
        break_after: If set, the stream drops after this many chunks.
    """

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self.chunks: list[str] = ["Hel", "lo", "!"]
        self.error: tuple[int, Any] | None = None
        self.unreachable = False
        self.break_after: int | None = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if self.unreachable:
            raise httpx.ConnectError("Connection refused", request=request)
        self.requests.append(json.loads(request.content))
        if self.error is not None:
            status_code, payload = self.error
            return httpx.Response(status_code, json=payload)
        if self.break_after is not None:
            return httpx.Response(
                200,
                headers={"content-type": "text/event-stream"},
                content=self._broken_stream(request),
            )
        return httpx.Response(
            200,
            headers={"content-type": "text/event-stream"},
            content=sse_body(self.chunks),
        )

    async def _broken_stream(self, request: httpx.Request) -> AsyncIterator[bytes]:
        yield _chunk_event({"role": "assistant", "content": ""}).encode()
        for text in self.chunks[: self.break_after]:
            yield _chunk_event({"content": text}).encode()
        raise httpx.ReadError("Connection reset by peer", request=request)


@pytest.fixture
def remote() -> FakeCompletionAPI:
    """Return a fresh fake remote API."""
    return FakeCompletionAPI()


@pytest.fixture
def completion_config() -> CompletionConfig:
    """Return config for the fake remote with no optional sampling params."""
    return CompletionConfig(
        api_key="sk-test-key",
        base_url=REMOTE_BASE_URL,
        model_name="gpt-test",
        temperature=None,
        max_tokens=None,
    )


@pytest.fixture
async def completion_service(
    remote: FakeCompletionAPI, completion_config: CompletionConfig
) -> AsyncGenerator[CompletionService]:
    """Create a CompletionService whose SDK client talks to the fake remote.

    Yields:
        Service ready for injection into the app.
    """
    client = AsyncOpenAI(
        api_key=completion_config.api_key,
        base_url=completion_config.base_url,
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(remote.handler)),
    )
    service = CompletionService(config=completion_config, client=client)
    yield service
    await service.close()


@pytest.fixture
def app(completion_service: CompletionService) -> FastAPI:
    """Create the FastAPI app with the fake-backed service injected."""
    return create_app(completion_service=completion_service)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
