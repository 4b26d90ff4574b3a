"""
Message model for chat conversation turns.
"""

from sqlalchemy import Column, Enum, ForeignKey, Index, Text
from sqlalchemy.orm import relationship

from app.schemas.chat import MessageRole

from .base import UUID, BaseModel


class Message(BaseModel):
    """
    Represents a single user or assistant message. System instructions are
    never stored.
    """

    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_conversation_created", "conversation_id", "created_at"),
    )

    conversation_id = Column(UUID(), ForeignKey("conversations.id"), nullable=False)
    role = Column(
        Enum(
            MessageRole,
            name="message_role",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
    )
    content = Column(Text, nullable=False)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
