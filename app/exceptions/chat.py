"""Chat session and message exceptions."""

from typing import Any

from .base import BaseAppException


class SessionNotFoundError(BaseAppException):
    """Raised when a session does not exist or belongs to another user."""

    def __init__(self, session_id: int | None = None, message: str = "Session not found"):
        details = {"session_id": session_id} if session_id is not None else None
        super().__init__(message=message, status_code=404, error_code="SESSION_NOT_FOUND", details=details)


class MessagePersistenceError(BaseAppException):
    """Raised when the assistant reply could not be stored after the user message was."""

    def __init__(
        self,
        message: str = "Failed to store the assistant reply",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=500,
            error_code="MESSAGE_PERSISTENCE_ERROR",
            details=details,
        )
