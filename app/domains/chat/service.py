"""Chat service layer orchestrating the conversation store and the completion client."""

import logging
import uuid

from app.core.config import CONTEXT_WINDOW
from app.domains.chat.interfaces import CompletionClient, ConversationStore, is_placeholder
from app.exceptions.base import BadRequestError
from app.schemas.chat import (
    ChatReplyResponse,
    ChatRequest,
    ConversationHistoryResponse,
    MessageRole,
)

logger = logging.getLogger(__name__)


class ChatService:
    """Stateless per-request orchestration of a member's chat.

    Verification happens before the service is reached; the service only
    sees entitled members.
    """

    def __init__(self, store: ConversationStore, completion: CompletionClient):
        self.store = store
        self.completion = completion

    async def get_conversation(self, user_id: str | None) -> ConversationHistoryResponse:
        """Get (or lazily create) the latest conversation of a user with its history.

        Args:
            user_id: Member id from the ``userId`` query parameter

        Returns:
            Conversation id and its messages, oldest first
        """
        if not user_id:
            raise BadRequestError("userId is required")

        conversation_id = await self.store.resolve_or_create(user_id, None)
        await self.store.commit()
        history = await self.store.history(conversation_id)

        return ConversationHistoryResponse(conversation_id=conversation_id, history=history)

    async def send_message(self, request: ChatRequest | None) -> ChatReplyResponse:
        """Store a user message, generate the reply and store it as well.

        Args:
            request: Parsed POST body

        Returns:
            Conversation id, the reply and the full history
        """
        if request is None or not request.user_id or not (request.message or "").strip():
            raise BadRequestError("userId and message are required")

        supplied_id = request.conversation_id
        if supplied_id and not is_placeholder(supplied_id):
            _ensure_conversation_id(supplied_id)

        conversation_id = await self.store.resolve_or_create(request.user_id, supplied_id)

        # The user message is committed before the reply is generated
        await self.store.append(conversation_id, MessageRole.USER, request.message)

        context = await self.store.history(conversation_id, limit=CONTEXT_WINDOW)
        reply = await self.completion.complete(context)

        await self.store.append(conversation_id, MessageRole.ASSISTANT, reply)
        history = await self.store.history(conversation_id)

        logger.info(f"Reply stored in conversation {conversation_id} ({len(history)} messages)")
        return ChatReplyResponse(conversation_id=conversation_id, reply=reply, history=history)


def _ensure_conversation_id(conversation_id: str) -> None:
    try:
        uuid.UUID(conversation_id)
    except ValueError:
        raise BadRequestError(f"Invalid conversationId: {conversation_id}") from None
