"""Streaming chat proxy endpoint.

Validates the conversation, forwards it to the remote completion API and
relays the token stream back as chunked plain text.
"""

import json
import logging
from typing import Any

import openai
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import StreamingResponse
from pydantic import ValidationError

from multichat.api.errors import ChatProxyError
from multichat.api.relay import StreamRelay
from multichat.completion.service import CompletionService
from multichat.models.schemas import ChatRequest, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])

# Chunks buffered between the remote stream and a slow reader
RELAY_QUEUE_SIZE = 16

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",  # Disable nginx buffering
}


def get_completion_service(request: Request) -> CompletionService:
    """Return the completion service built at application startup."""
    service: CompletionService | None = getattr(
        request.app.state, "completion_service", None
    )
    if service is None:
        raise ChatProxyError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An error occurred",
            "Completion service is not configured",
        )
    return service


def _parse_chat_request(body: Any) -> ChatRequest:
    """Validate the decoded request body.

    Raises:
        ChatProxyError: 400 if messages are absent, not a list, or empty.
    """
    try:
        return ChatRequest.model_validate(body)
    except ValidationError as e:
        logger.warning(f"Invalid chat request: {e.error_count()} validation errors")
        raise ChatProxyError(
            status.HTTP_400_BAD_REQUEST,
            "Invalid or empty messages array",
            [
                {"loc": list(err["loc"]), "msg": err["msg"]}
                for err in e.errors(include_url=False)
            ],
        ) from e


def _remote_error_payload(error: openai.APIStatusError) -> Any:
    """Return the remote error body as JSON when possible, text otherwise."""
    try:
        return error.response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return error.response.text


@router.post(
    "/chat",
    response_class=StreamingResponse,
    responses={
        200: {"content": {"text/plain": {}}, "description": "Streamed assistant reply"},
        400: {"model": ErrorResponse, "description": "Invalid or empty messages"},
        500: {"model": ErrorResponse, "description": "Unhandled failure"},
    },
)
async def chat(
    request: Request,
    service: CompletionService = Depends(get_completion_service),
) -> StreamingResponse:
    """Stream a completion for the posted conversation.

    Request body: ``{"messages": [{"role": ..., "content": ...}, ...]}``.
    Fields other than role and content are dropped before forwarding.

    Returns:
        StreamingResponse with the reply text chunks in arrival order.

    Raises:
        400: Missing, malformed or empty messages.
        4xx/5xx: Remote API status passed through, with its payload as details.
        500: Any other failure (bad JSON body, remote unreachable).
    """
    try:
        body = await request.json()
        chat_request = _parse_chat_request(body)
        logger.info(f"Chat request with {len(chat_request.messages)} messages")

        source = await service.open_stream(chat_request.messages)
    except ChatProxyError:
        raise
    except openai.APIStatusError as e:
        payload = _remote_error_payload(e)
        logger.error(f"Completion API error {e.status_code}: {payload}")
        raise ChatProxyError(e.status_code, "Error from completion API", payload) from e
    except Exception as e:
        logger.exception("Chat request failed")
        raise ChatProxyError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An error occurred",
            str(e) or type(e).__name__,
        ) from e

    relay = StreamRelay(source, maxsize=RELAY_QUEUE_SIZE)
    return StreamingResponse(
        relay.drain(),
        media_type="text/plain; charset=utf-8",
        headers=STREAM_HEADERS,
    )
