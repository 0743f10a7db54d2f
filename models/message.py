"""
Chat message model for user and assistant messages.
"""

import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class MessageRole(str, enum.Enum):
    """Message role enumeration."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(Base):
    """
    Represents a single immutable chat message.

    Messages are never edited, so the table carries no ``updated_at`` column.
    """

    __tablename__ = "messages"
    __table_args__ = (Index("idx_messages_session_created", "session_id", "created_at"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("chat_sessions.id", ondelete="CASCADE"), nullable=False)
    role = Column(
        Enum(
            MessageRole,
            name="messagerole",
            values_callable=lambda roles: [role.value for role in roles],
        ),
        nullable=False,
    )
    content = Column(Text, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relationships
    session = relationship("ChatSession", back_populates="messages")
