"""SQLAlchemy-backed conversation store."""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.chat.interfaces import is_placeholder
from app.exceptions.store import StoreReadError, StoreWriteError
from app.schemas.chat import ChatTurn, MessageRole
from models.conversation import Conversation
from models.message import Message

logger = logging.getLogger(__name__)


class SQLAlchemyConversationStore:
    """Reads and writes conversations and messages through an async session.

    A newly created conversation is only flushed; it becomes durable together
    with the next committed message (or an explicit :meth:`commit`), so a
    failed first insert rolls the conversation back with it.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_or_create(self, user_id: str, supplied_id: str | None = None) -> str:
        """Return the conversation id to use for this request.

        Args:
            user_id: Owner of the conversation
            supplied_id: Client-supplied id; real ids are trusted as-is

        Returns:
            Conversation id
        """
        if supplied_id and not is_placeholder(supplied_id):
            return supplied_id

        if not supplied_id:
            latest = await self.latest_for_user(user_id)
            if latest:
                return str(latest.id)

        conversation = await self.create(user_id)
        logger.info(f"Created conversation {conversation.id} for user {user_id}")
        return str(conversation.id)

    async def latest_for_user(self, user_id: str) -> Conversation | None:
        """Get the most recently created conversation of a user."""
        query = (
            select(Conversation)
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.created_at.desc())
            .limit(1)
        )
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up conversation for user {user_id}: {str(e)}")
            raise StoreReadError(f"Failed to look up conversation: {str(e)}") from e
        return result.scalar_one_or_none()

    async def create(self, user_id: str) -> Conversation:
        """Create a new, not yet committed, conversation."""
        conversation = Conversation(user_id=user_id)
        self.db.add(conversation)
        try:
            await self.db.flush()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to create conversation for user {user_id}: {str(e)}")
            raise StoreWriteError(f"Failed to create conversation: {str(e)}") from e
        return conversation

    async def append(self, conversation_id: str, role: MessageRole, content: str) -> None:
        """Insert a message and commit it with any pending conversation."""
        message = Message(conversation_id=uuid.UUID(conversation_id), role=role, content=content)
        self.db.add(message)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to store {role.value} message in {conversation_id}: {str(e)}")
            raise StoreWriteError(f"Failed to store {role.value} message: {str(e)}") from e

    async def history(self, conversation_id: str, limit: int | None = None) -> list[ChatTurn]:
        """Get messages oldest first; with ``limit`` only the most recent ones."""
        query = select(Message.role, Message.content).where(
            Message.conversation_id == uuid.UUID(conversation_id)
        )
        if limit is None:
            query = query.order_by(Message.created_at.asc())
        else:
            query = query.order_by(Message.created_at.desc()).limit(limit)

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as e:
            logger.error(f"Failed to read messages of {conversation_id}: {str(e)}")
            raise StoreReadError(f"Failed to read messages: {str(e)}") from e

        rows = result.all()
        if limit is not None:
            rows = list(reversed(rows))
        return [ChatTurn(role=row.role, content=row.content) for row in rows]

    async def commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StoreWriteError(f"Failed to commit conversation: {str(e)}") from e
