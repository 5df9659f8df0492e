"""Integration tests for the conversation client talking to the real app.

ChatApiClient is routed into the FastAPI app over ASGITransport; the app
relays from the fake remote. Covers the whole chain without a browser.
"""

from typing import Any

import pytest
import pytest_check as check
from fastapi import FastAPI
from httpx import ASGITransport

from multichat.models.schemas import Role
from multichat.ui.api_client import ChatApiClient
from multichat.ui.conversation import ChatState, ConversationClient
from multichat.ui.identity import IdentityStore
from tests.conftest import FakeCompletionAPI


@pytest.fixture
def storage() -> dict[str, Any]:
    return {}


@pytest.fixture
def conversation(app: FastAPI, storage: dict[str, Any]) -> ConversationClient:
    api = ChatApiClient(base_url="http://test", transport=ASGITransport(app=app))
    client = ConversationClient(store=IdentityStore(storage), api=api)
    client.login("Ada", "ada@example.com")
    return client


class TestConversationFlow:
    async def test_streamed_reply_is_assembled(
        self, conversation: ConversationClient, remote: FakeCompletionAPI
    ) -> None:
        """Remote chunks "Hel", "lo", "!" become the reply "Hello!"."""
        conversation.input_buffer = "Say hello"

        await conversation.send()

        check.equal([m.role for m in conversation.messages], [Role.USER, Role.ASSISTANT])
        check.equal(conversation.messages[-1].content, "Hello!")
        check.is_none(conversation.last_error)
        check.equal(conversation.state, ChatState.IDLE)

    async def test_identity_never_reaches_remote(
        self, conversation: ConversationClient, remote: FakeCompletionAPI
    ) -> None:
        conversation.input_buffer = "Hi"
        await conversation.send()

        forwarded = str(remote.requests[0])
        check.is_not_in("ada@example.com", forwarded)
        check.is_not_in(conversation.identity.id, forwarded)
        check.equal(remote.requests[0]["messages"], [{"role": "user", "content": "Hi"}])

    async def test_multi_turn_history_reaches_remote_in_order(
        self, conversation: ConversationClient, remote: FakeCompletionAPI
    ) -> None:
        for text in ("One", "Two"):
            conversation.input_buffer = text
            await conversation.send()

        assert remote.requests[1]["messages"] == [
            {"role": "user", "content": "One"},
            {"role": "assistant", "content": "Hello!"},
            {"role": "user", "content": "Two"},
        ]

    async def test_remote_rejection_becomes_inline_error(
        self, conversation: ConversationClient, remote: FakeCompletionAPI
    ) -> None:
        remote.error = (429, {"error": "rate_limited"})
        conversation.input_buffer = "Hi"

        await conversation.send()

        check.equal(conversation.last_error, "Error from completion API: rate_limited (HTTP 429)")
        check.equal([m.role for m in conversation.messages], [Role.USER])
        check.equal(conversation.state, ChatState.IDLE)

    async def test_user_can_resend_after_failure(
        self, conversation: ConversationClient, remote: FakeCompletionAPI
    ) -> None:
        remote.unreachable = True
        conversation.input_buffer = "Hi"
        await conversation.send()
        check.is_not_none(conversation.last_error)

        remote.unreachable = False
        conversation.input_buffer = "Hi"
        await conversation.send()

        check.is_none(conversation.last_error)
        check.equal(conversation.messages[-1].content, "Hello!")
        check.equal(
            [m["role"] for m in remote.requests[-1]["messages"]], ["user", "user"]
        )
