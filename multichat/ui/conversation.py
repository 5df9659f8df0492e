"""Conversation state for one browser session.

Holds the message list, input buffer, streaming and error flags, and the
local display identity. The chat page renders this state and forwards user
actions to it; the class itself has no NiceGUI dependency.

States:
    UNIDENTIFIED -> login() -> IDLE
    IDLE -> send() -> STREAMING -> (complete | error) -> IDLE
    any identified state -> logout() -> UNIDENTIFIED
"""

import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum

from multichat.models.schemas import LocalIdentity, Message, Role
from multichat.ui.api_client import ChatApiClient
from multichat.ui.identity import IdentityStore

logger = logging.getLogger(__name__)


class ChatState(str, Enum):
    UNIDENTIFIED = "unidentified"
    IDLE = "idle"
    STREAMING = "streaming"


def _timestamp() -> str:
    return datetime.now().strftime("%I:%M %p")


class ConversationClient:
    """Manages chat state for a browser session.

    Attributes:
        messages: Conversation so far, in display order.
        input_buffer: Text typed but not yet sent.
        is_streaming: True while a reply is being received.
        last_error: Message of the last failed turn, until dismissed.
        identity: Display identity, None until login.
        on_change: Called whenever the visible message list changes.
    """

    def __init__(
        self,
        store: IdentityStore,
        api: ChatApiClient,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._store = store
        self._api = api
        # Bumped on logout so callbacks of an abandoned turn become no-ops
        self._generation = 0
        self.on_change = on_change
        self.messages: list[Message] = []
        self.input_buffer: str = ""
        self.is_streaming: bool = False
        self.last_error: str | None = None
        self.identity: LocalIdentity | None = store.load()

    @property
    def state(self) -> ChatState:
        if self.identity is None:
            return ChatState.UNIDENTIFIED
        if self.is_streaming:
            return ChatState.STREAMING
        return ChatState.IDLE

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()

    def login(self, name: str, email: str) -> LocalIdentity:
        """Create and persist the display identity.

        Once set, the identity stays until logout; a repeated login returns
        the current identity unchanged.

        Raises:
            ValueError: If name or email is blank.
        """
        if self.identity is not None:
            return self.identity
        name, email = name.strip(), email.strip()
        if not name or not email:
            raise ValueError("Please enter your name and email.")
        self.identity = LocalIdentity(name=name, email=email)
        self._store.save(self.identity)
        logger.info(f"Local identity created: {self.identity.id}")
        return self.identity

    def logout(self) -> None:
        """Forget the identity and the conversation."""
        self._store.clear()
        self._generation += 1
        self.identity = None
        self.messages.clear()
        self.input_buffer = ""
        self.is_streaming = False
        self.last_error = None
        self._notify()

    def dismiss_error(self) -> None:
        self.last_error = None

    async def send(self) -> bool:
        """Send the input buffer as a user turn and stream the reply.

        Returns:
            False without side effects when there is no identity, a reply
            is already streaming, or the input is blank. True otherwise,
            once the turn has ended (completed or failed).
        """
        text = self.input_buffer.strip()
        if self.identity is None or self.is_streaming or not text:
            return False

        generation = self._generation
        self.input_buffer = ""
        self.last_error = None
        self.is_streaming = True
        self.messages.append(Message(role=Role.USER, content=text, time=_timestamp()))
        self._notify()

        history = [message.to_payload() for message in self.messages]
        reply: Message | None = None

        def on_start() -> None:
            if generation == self._generation:
                logger.debug("Reply stream accepted by proxy")

        def on_chunk(chunk: str) -> None:
            nonlocal reply
            if generation != self._generation or not chunk:
                return
            # The reply exists only once it has text, so the displayed list
            # and the next turn's history never carry an empty assistant turn
            if reply is None:
                reply = Message(role=Role.ASSISTANT, time=_timestamp())
                self.messages.append(reply)
            reply.content += chunk
            self._notify()

        def on_complete() -> None:
            if generation == self._generation:
                self.is_streaming = False
                self._notify()

        def on_error(error: str) -> None:
            if generation != self._generation:
                return
            logger.warning(f"Chat turn failed: {error}")
            # Partial reply stays as received
            self.last_error = error
            self.is_streaming = False
            self._notify()

        try:
            await self._api.stream_chat(history, on_start, on_chunk, on_complete, on_error)
        finally:
            if generation == self._generation:
                self.is_streaming = False
        return True
