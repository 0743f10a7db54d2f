"""Chat session schemas for request/response serialization."""

from __future__ import annotations

from pydantic import Field, field_validator

from app.core.config import settings

from .base import BaseModelSchema, BaseSchema
from .message import ChatTurn


def _clean_title(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Title cannot be empty or only whitespace")
    return v


class SessionCreate(BaseSchema):
    """Input of ``session.create``."""

    title: str | None = Field(None, max_length=settings.title_max_length, description="Optional title")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        """Blank titles fall back to the default title."""
        if v is None:
            return v
        return v.strip() or None


class SessionUpdateTitle(BaseSchema):
    """Input of ``session.updateTitle``."""

    id: int = Field(..., description="Session ID")
    title: str = Field(..., min_length=1, max_length=settings.title_max_length)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)


class SessionDelete(BaseSchema):
    """Input of ``session.delete``."""

    id: int = Field(..., description="Session ID")


class SessionResponse(BaseModelSchema):
    """Session record as returned to clients."""

    title: str | None


class SummarizeTitleRequest(BaseSchema):
    """Input of ``session.summarizeTitle``."""

    messages: list[ChatTurn] = Field(..., min_length=1, description="Early conversation history")


class SummarizeTitleResponse(BaseSchema):
    title: str
