"""
Models package initialization.
"""

from .base import Base, BaseModel
from .conversation import Conversation
from .message import Message

__all__ = [
    "Base",
    "BaseModel",
    "Conversation",
    "Message",
]
