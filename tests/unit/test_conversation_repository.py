"""
Unit tests for the SQLAlchemy conversation store, run against SQLite.
"""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domains.chat.repository import SQLAlchemyConversationStore
from app.schemas.chat import MessageRole
from models.conversation import Conversation
from models.message import Message


async def count(db: AsyncSession, model) -> int:
    result = await db.execute(select(func.count(model.id)))
    return result.scalar() or 0


@pytest.mark.asyncio
class TestConversationResolution:
    """Test cases for resolve_or_create."""

    async def test_creates_conversation_for_new_user(self, test_db: AsyncSession):
        store = SQLAlchemyConversationStore(test_db)

        conversation_id = await store.resolve_or_create("u1")
        await store.commit()

        conversation = await test_db.get(Conversation, uuid.UUID(conversation_id))
        assert conversation.user_id == "u1"
        assert await count(test_db, Conversation) == 1

    async def test_reuses_latest_conversation(self, test_db: AsyncSession):
        store = SQLAlchemyConversationStore(test_db)
        first = await store.resolve_or_create("u1")
        await store.commit()

        second = await store.resolve_or_create("u1")

        assert second == first
        assert await count(test_db, Conversation) == 1

    async def test_real_id_is_idempotent(self, test_db: AsyncSession):
        store = SQLAlchemyConversationStore(test_db)
        conversation_id = await store.resolve_or_create("u1")
        await store.commit()

        assert await store.resolve_or_create("u1", conversation_id) == conversation_id
        assert await store.resolve_or_create("u1", conversation_id) == conversation_id
        assert await count(test_db, Conversation) == 1

    async def test_placeholder_creates_new_conversation(self, test_db: AsyncSession):
        store = SQLAlchemyConversationStore(test_db)
        existing = await store.resolve_or_create("u1")
        await store.commit()

        created = await store.resolve_or_create("u1", "local_1712345")
        await store.commit()

        assert created != existing
        assert await count(test_db, Conversation) == 2

    async def test_conversations_are_per_user(self, test_db: AsyncSession):
        store = SQLAlchemyConversationStore(test_db)
        mine = await store.resolve_or_create("u1")
        await store.commit()

        theirs = await store.resolve_or_create("u2")

        assert theirs != mine

    async def test_uncommitted_conversation_is_rolled_back(self, test_db: AsyncSession):
        store = SQLAlchemyConversationStore(test_db)
        await store.resolve_or_create("u1")

        await test_db.rollback()

        assert await count(test_db, Conversation) == 0


@pytest.mark.asyncio
class TestMessages:
    """Test cases for append and history."""

    async def test_history_is_oldest_first(self, test_db: AsyncSession):
        store = SQLAlchemyConversationStore(test_db)
        conversation_id = await store.resolve_or_create("u1")

        await store.append(conversation_id, MessageRole.USER, "Vad är uppsägningstid?")
        await store.append(conversation_id, MessageRole.ASSISTANT, "En månad som minst.")

        history = await store.history(conversation_id)
        assert [(turn.role, turn.content) for turn in history] == [
            (MessageRole.USER, "Vad är uppsägningstid?"),
            (MessageRole.ASSISTANT, "En månad som minst."),
        ]

    async def test_first_append_commits_new_conversation(self, test_db: AsyncSession):
        store = SQLAlchemyConversationStore(test_db)
        conversation_id = await store.resolve_or_create("u1")

        await store.append(conversation_id, MessageRole.USER, "Hej")
        await test_db.rollback()

        assert await count(test_db, Conversation) == 1
        assert await count(test_db, Message) == 1
        assert len(await store.history(conversation_id)) == 1

    async def test_limit_keeps_most_recent_messages(self, test_db: AsyncSession):
        store = SQLAlchemyConversationStore(test_db)
        conversation_id = await store.resolve_or_create("u1")
        for i in range(5):
            await store.append(conversation_id, MessageRole.USER, f"fråga {i}")

        history = await store.history(conversation_id, limit=3)

        assert [turn.content for turn in history] == ["fråga 2", "fråga 3", "fråga 4"]

    async def test_history_of_other_conversation_is_excluded(self, test_db: AsyncSession):
        store = SQLAlchemyConversationStore(test_db)
        first = await store.resolve_or_create("u1")
        await store.append(first, MessageRole.USER, "i första")
        second = await store.resolve_or_create("u2")
        await store.append(second, MessageRole.USER, "i andra")

        assert [turn.content for turn in await store.history(first)] == ["i första"]
        assert await store.history(str(uuid.uuid4())) == []
