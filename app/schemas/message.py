"""Message schemas for request/response serialization."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from app.core.config import settings
from models.message import MessageRole

from .base import BaseSchema


class ChatTurn(BaseSchema):
    """A role-tagged message as fed to the reply and title generators."""

    role: MessageRole
    content: str


class MessageResponse(BaseSchema):
    """Schema for message response."""

    id: int
    session_id: int
    role: MessageRole
    content: str
    created_at: datetime


class SendMessageRequest(BaseSchema):
    """Input of ``message.sendMessage``."""

    session_id: int = Field(..., description="Session ID")
    content: str = Field(..., min_length=1, max_length=settings.message_max_length, description="Message content")

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        """Reject whitespace-only messages."""
        if not v.strip():
            raise ValueError("Message content cannot be empty or only whitespace")
        return v


class SendMessageResponse(BaseSchema):
    """Both records created by a send."""

    user: MessageResponse
    assistant: MessageResponse


__all__ = [
    "MessageRole",
    "ChatTurn",
    "MessageResponse",
    "SendMessageRequest",
    "SendMessageResponse",
]
