"""
Models package initialization.
"""

from .base import Base, BaseModel, utcnow
from .chat_session import DEFAULT_SESSION_TITLE, ChatSession
from .message import Message, MessageRole
from .user import User

__all__ = [
    "Base",
    "BaseModel",
    "utcnow",
    "User",
    # Chat models
    "ChatSession",
    "Message",
    "MessageRole",
    "DEFAULT_SESSION_TITLE",
]
