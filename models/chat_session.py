"""
Chat session model for career guidance conversations.
"""

from sqlalchemy import Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from .base import BaseModel

DEFAULT_SESSION_TITLE = "New Chat"


class ChatSession(BaseModel):
    """
    Represents a chat session owned by exactly one user.

    ``updated_at`` is bumped on every message send, which drives the
    most-recently-active ordering of the session list.
    """

    __tablename__ = "chat_sessions"
    __table_args__ = (Index("idx_chat_sessions_user_updated", "user_id", "updated_at"),)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=True)  # Derived once the first reply is stored

    # Relationships
    user = relationship("User", back_populates="chat_sessions")
    messages = relationship(
        "Message",
        back_populates="session",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Message.created_at",
    )
