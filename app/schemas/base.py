"""Base schemas for the application."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema class with common configuration.

    Fields are exposed to clients in camelCase and accepted in either casing.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class BaseModelSchema(BaseSchema):
    """Base schema for database models."""

    id: int
    created_at: datetime
    updated_at: datetime


class OkResponse(BaseSchema):
    """Acknowledgement returned by idempotent mutations."""

    ok: bool = True
