# ruff: noqa: D107
"""Base exception classes.

The structured ``detail`` is unpacked into the uniform error envelope by the
HTTP exception handler in ``app.main``.
"""

from typing import Any

from fastapi import HTTPException


class BaseAppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}

        super().__init__(
            status_code=status_code,
            detail={"message": message, "error_code": error_code, "details": details},
            headers=headers,
        )

    def __str__(self) -> str:
        return self.message


class UnauthorizedError(BaseAppException):
    """Exception raised when no caller identity can be resolved."""

    def __init__(
        self,
        message: str = "Authentication required",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            status_code=401,
            error_code="UNAUTHORIZED",
            details=details,
            headers={"WWW-Authenticate": "Bearer"},
        )
