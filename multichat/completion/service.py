"""Remote chat-completion client with streaming support.

Wraps ``openai.AsyncOpenAI`` behind a small service that the proxy endpoint
receives by injection. The service is built once at process start and
shared by all requests; it holds no per-request state.

The SDK client is created with ``max_retries=0``: a rejected request is
reported to the caller as-is and never retried.
"""

import logging
from collections.abc import AsyncIterator, Sequence
from typing import Any

from openai import AsyncOpenAI, AsyncStream
from openai.types.chat import ChatCompletionChunk

from multichat.completion.config import CompletionConfig, get_completion_config
from multichat.models.schemas import ChatMessage

logger = logging.getLogger(__name__)


class CompletionService:
    """Service for streaming chat completions from the remote API."""

    def __init__(
        self,
        config: CompletionConfig | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        """Initialize the completion service.

        Args:
            config: Optional configuration.
                    Loads from environment if not provided.
            client: Optional pre-built SDK client (tests pass one wired to
                    a mock transport).
        """
        self._config = config or get_completion_config()
        self._client = client or self._create_client()

    @property
    def model_name(self) -> str:
        return self._config.model_name

    def _create_client(self) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=self._config.api_key,
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            max_retries=0,
        )

    def build_request(self, messages: Sequence[ChatMessage]) -> dict[str, Any]:
        """Build the streamed completion request for a conversation.

        Only ``role`` and ``content`` of each message are forwarded, in order.
        Sampling parameters are included only when configured.
        """
        request: dict[str, Any] = {
            "model": self._config.model_name,
            "stream": True,
            "messages": [
                {"role": message.role, "content": message.content}
                for message in messages
            ],
        }
        if self._config.temperature is not None:
            request["temperature"] = self._config.temperature
        if self._config.max_tokens is not None:
            request["max_tokens"] = self._config.max_tokens
        return request

    async def open_stream(self, messages: Sequence[ChatMessage]) -> AsyncIterator[str]:
        """Start a streamed completion and return its text deltas.

        Awaits the remote response head, so a rejected request raises here,
        before anything has been sent to the caller.

        Args:
            messages: The conversation, oldest first.

        Returns:
            Async iterator over non-empty content deltas in arrival order.

        Raises:
            openai.APIStatusError: The remote API returned a non-success status.
            openai.APIConnectionError: The remote API could not be reached.
        """
        request = self.build_request(messages)
        logger.info(
            f"Requesting completion: model={request['model']}, messages={len(messages)}"
        )
        stream = await self._client.chat.completions.create(**request)
        return self._text_deltas(stream)

    async def _text_deltas(
        self, stream: AsyncStream[ChatCompletionChunk]
    ) -> AsyncIterator[str]:
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                content = chunk.choices[0].delta.content
                if content:
                    yield content
        finally:
            await stream.close()

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        await self._client.close()
