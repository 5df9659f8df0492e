import uuid
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Speaker of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A message as accepted by the proxy endpoint.

    Extra fields sent by clients (ids, timestamps) are dropped on validation,
    so ``model_dump()`` is exactly the ``{role, content}`` projection.
    """

    model_config = ConfigDict(extra="ignore")

    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    """Request payload for POST /api/chat.

    Attributes:
        messages: Full conversation, oldest first.
    """

    messages: list[ChatMessage] = Field(..., min_length=1)


class ErrorResponse(BaseModel):
    """JSON body of every non-streaming error response.

    Attributes:
        error: Short human-readable summary.
        details: Validation errors, remote payload or diagnostic text.
    """

    error: str
    details: Any | None = None


class Message(BaseModel):
    """A message held by the conversation client.

    Attributes:
        id: Opaque identifier, unique within the session.
        role: user or assistant.
        content: Message text; grows while an assistant reply streams in.
        time: Display timestamp.
    """

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Role
    content: str = ""
    time: str = ""

    def to_payload(self) -> dict[str, str]:
        """Return the ``{role, content}`` form sent to the proxy."""
        return {"role": self.role.value, "content": self.content}


class LocalIdentity(BaseModel):
    """Display identity captured at login and kept in browser storage.

    Purely cosmetic: never authenticated, never sent to the completion API.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)

    @property
    def initial(self) -> str:
        """Avatar label for this user's messages."""
        return self.name[0].upper()
