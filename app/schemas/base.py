"""Base schemas for the application."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base schema class with common configuration."""
    model_config = ConfigDict(from_attributes=True)


class CamelSchema(BaseSchema):
    """Schema exchanged with the web client using camelCase keys."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


class ErrorResponse(BaseSchema):
    """Error body returned for every failed request."""
    error: str
    error_code: str = "INTERNAL_ERROR"
    request_id: str | None = None
