"""
Conversation model for chat sessions with the legal assistant.
"""

from sqlalchemy import Column, Index, String
from sqlalchemy.orm import relationship

from .base import BaseModel


class Conversation(BaseModel):
    """
    Represents a chat conversation owned by a Memberstack member.
    """

    __tablename__ = "conversations"
    __table_args__ = (Index("idx_conversations_user_created", "user_id", "created_at"),)

    user_id = Column(String(255), nullable=False)

    # Relationships
    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.created_at",
    )
