"""User-related Pydantic schemas for request/response validation."""

from typing import Optional

from .base import BaseModelSchema


class UserResponse(BaseModelSchema):
    """Schema for user response data."""

    clerk_user_id: str
    email: Optional[str]
    name: Optional[str]
