"""Chat schemas for request/response serialization."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from .base import BaseSchema, CamelSchema


class MessageRole(str, Enum):
    """Message role enumeration."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatTurn(BaseSchema):
    """A single role/content pair as exchanged with the client and the model."""

    role: MessageRole
    content: str


class ChatRequest(CamelSchema):
    """Schema for the POST body.

    Every field is optional at the parsing layer so that missing input is
    reported as a 400 after the member token has been verified.
    """

    user_id: str | None = Field(None, description="Memberstack member id of the caller")
    message: str | None = Field(None, description="User message")
    conversation_id: str | None = Field(
        None, description="Existing or placeholder conversation id, null for latest"
    )


class ConversationHistoryResponse(CamelSchema):
    """Schema for GET responses."""

    conversation_id: str
    history: list[ChatTurn] = Field(default=[], description="Messages, oldest first")


class ChatReplyResponse(ConversationHistoryResponse):
    """Schema for POST responses."""

    reply: str


ConversationHistoryResponse.model_rebuild()
ChatReplyResponse.model_rebuild()

__all__ = [
    "MessageRole",
    "ChatTurn",
    "ChatRequest",
    "ConversationHistoryResponse",
    "ChatReplyResponse",
]
