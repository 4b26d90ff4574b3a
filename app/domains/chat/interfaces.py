"""Collaborator interfaces used by the chat service."""

from typing import Protocol

from app.core.config import PLACEHOLDER_PREFIX
from app.schemas.chat import ChatTurn, MessageRole


def is_placeholder(conversation_id: str | None) -> bool:
    """Client-generated ids that have no stored conversation yet."""
    return bool(conversation_id) and conversation_id.startswith(PLACEHOLDER_PREFIX)


class ConversationStore(Protocol):
    """Persistence of conversations and their messages."""

    async def resolve_or_create(self, user_id: str, supplied_id: str | None = None) -> str: ...

    async def append(self, conversation_id: str, role: MessageRole, content: str) -> None: ...

    async def history(self, conversation_id: str, limit: int | None = None) -> list[ChatTurn]: ...

    async def commit(self) -> None: ...


class CompletionClient(Protocol):
    """Generates the assistant reply for an ordered conversation history."""

    async def complete(self, history: list[ChatTurn]) -> str: ...
