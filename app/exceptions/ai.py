"""Failures of the Gemini completion API.

``GeminiClient`` raises these; the reply and title generators catch every one
of them and degrade to a fallback value, so they never reach an API caller.
Each subclass only fixes its ``error_code`` and default message.
"""

from typing import Any

from .base import BaseAppException


class AIServiceError(BaseAppException):
    """Any failed call to the completion API. Used as-is for unexpected 4xx responses."""

    error_code = "AI_SERVICE_ERROR"
    default_message = "AI service error occurred"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        super().__init__(
            message or self.default_message,
            status_code=502,
            error_code=self.error_code,
            details=details,
        )


class AIServiceUnavailableError(AIServiceError):
    """Network failure or a 5xx response."""

    error_code = "AI_SERVICE_UNAVAILABLE"
    default_message = "AI service is temporarily unavailable"


class AIQuotaExceededError(AIServiceError):
    error_code = "AI_QUOTA_EXCEEDED"
    default_message = "AI service quota exceeded"


class AIRateLimitError(AIServiceError):
    """HTTP 429 without a quota message; ``retry_after`` is in seconds when known."""

    error_code = "AI_RATE_LIMITED"
    default_message = "AI service rate limit exceeded"

    def __init__(
        self,
        message: str | None = None,
        retry_after: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = dict(details or {})
        if retry_after:
            details["retry_after"] = retry_after
        super().__init__(message, details)


class AITimeoutError(AIServiceError):
    error_code = "AI_TIMEOUT"
    default_message = "AI service request timed out"


class AIParsingError(AIServiceError):
    """The response body is not JSON or carries no candidate text."""

    error_code = "AI_PARSING_ERROR"
    default_message = "Failed to parse AI service response"


class AIConfigurationError(AIServiceError):
    error_code = "AI_CONFIGURATION_ERROR"
    default_message = "AI service is not properly configured"


class AIContentFilterError(AIServiceError):
    """The prompt was blocked by the provider's safety filters."""

    error_code = "AI_CONTENT_FILTERED"
    default_message = "Content was blocked by AI safety filters"
